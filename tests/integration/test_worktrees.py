# -----------------------------------------------------------------------------
# /*
#  * Copyright (C) 2025 CodeStory
#  *
#  * This program is free software; you can redistribute it and/or modify
#  * it under the terms of the GNU General Public License as published by
#  * the Free Software Foundation; Version 2.
#  *
#  * This program is distributed in the hope that it will be useful,
#  * but WITHOUT ANY WARRANTY; without even the implied warranty of
#  * MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
#  * GNU General Public License for more details.
#  *
#  * You should have received a copy of the GNU General Public License
#  * along with this program; if not, you can contact us at support@codestory.build
#  */
# -----------------------------------------------------------------------------

import pytest

from merges.commands.split import run_split
from merges.core.data.chunk_plan import ChunkPlan
from merges.core.exceptions import GitError
from merges.core.state.state import MergesState

MODELS = ["src/models/user.rs", "src/models/post.rs"]
API = ["src/api/routes.rs", "src/api/handlers.rs"]


def worktree_dir(repo, branch: str):
    return repo.path / ".git" / "merges-worktrees" / branch.replace("/", "-")


def test_split_creates_a_worktree_per_chunk(repo, worktree_state, global_context):
    run_split(
        global_context,
        [ChunkPlan(name="models", files=MODELS), ChunkPlan(name="api", files=API)],
    )

    for branch in ("feat/big-chunk-1-models", "feat/big-chunk-2-api"):
        path = worktree_dir(repo, branch)
        assert path.is_dir()
        assert repo.git("rev-parse", "--abbrev-ref", "HEAD", cwd=path) == branch
        assert repo.git("status", "--porcelain", cwd=path) == ""

    assert (worktree_dir(repo, "feat/big-chunk-1-models") / "src/models/user.rs").exists()
    assert not (worktree_dir(repo, "feat/big-chunk-1-models") / "src/api/routes.rs").exists()


def test_split_in_worktree_mode_never_leaves_source_branch(repo, worktree_state, global_context):
    before = repo.tip("HEAD")

    run_split(global_context, [ChunkPlan(name="models", files=MODELS)])

    assert repo.current_branch() == "feat/big"
    assert repo.tip("HEAD") == before
    assert repo.git("status", "--porcelain") == ""


def test_worktree_split_rollback_removes_worktrees(repo, worktree_state, global_context):
    repo.git("branch", "feat/big-chunk-2-api", "main")

    with pytest.raises(GitError):
        run_split(
            global_context,
            [ChunkPlan(name="models", files=MODELS), ChunkPlan(name="api", files=API)],
        )

    assert not worktree_dir(repo, "feat/big-chunk-1-models").exists()
    assert not repo.branch_exists("feat/big-chunk-1-models")
    assert "merges-worktrees" not in repo.git("worktree", "list")
    assert MergesState.load(repo.path).chunks == []
