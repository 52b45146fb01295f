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

from merges.commands.clean import run_clean
from merges.commands.split import run_split
from merges.context import CleanContext
from merges.core.data.chunk_plan import ChunkPlan
from merges.core.exceptions import ChunkNotFoundError, GitError, MergesError
from merges.core.state.state import MergesState

PLAN = [
    ChunkPlan(name="models", files=["src/models/user.rs", "src/models/post.rs"]),
    ChunkPlan(name="api", files=["src/api/routes.rs", "src/api/handlers.rs"]),
]


def test_clean_all_chunks(repo, state, global_context):
    run_split(global_context, PLAN)

    report = run_clean(global_context, CleanContext())

    assert report.all_ok()
    assert report.removed == ["models", "api"]
    assert repo.chunk_branches() == []
    assert MergesState.load(repo.path).chunks == []


def test_clean_selected_chunk(repo, state, global_context):
    run_split(global_context, PLAN)

    run_clean(global_context, CleanContext(chunks=("api",)))

    assert repo.chunk_branches() == ["feat/big-chunk-1-models"]
    assert [c.name for c in MergesState.load(repo.path).chunks] == ["models"]


def test_clean_unknown_chunk(repo, state, global_context):
    run_split(global_context, PLAN)

    with pytest.raises(ChunkNotFoundError):
        run_clean(global_context, CleanContext(chunks=("nope",)))
    assert len(repo.chunk_branches()) == 2


def test_clean_without_chunks(repo, state, global_context):
    report = run_clean(global_context, CleanContext())

    assert report.removed == []
    assert report.all_ok()


def test_clean_declined(repo, state, global_context):
    run_split(global_context, PLAN)
    seen = []

    def decline(branches):
        seen.extend(branches)
        return False

    with pytest.raises(MergesError):
        run_clean(global_context, CleanContext(), confirm=decline)

    assert seen == ["feat/big-chunk-1-models", "feat/big-chunk-2-api"]
    assert len(repo.chunk_branches()) == 2


def test_clean_leaves_checked_out_chunk(repo, state, global_context):
    run_split(global_context, PLAN)
    repo.git("checkout", "-q", "feat/big-chunk-1-models")

    report = run_clean(global_context, CleanContext())

    assert report.all_ok()
    assert repo.current_branch() == "feat/big"
    assert repo.chunk_branches() == []


def test_clean_tolerates_branch_deleted_by_hand(repo, state, global_context):
    run_split(global_context, PLAN)
    repo.git("branch", "-D", "feat/big-chunk-2-api")

    report = run_clean(global_context, CleanContext())

    assert report.removed == ["models", "api"]
    assert MergesState.load(repo.path).chunks == []


def test_clean_keeps_chunks_that_failed(repo, state, global_context, monkeypatch):
    run_split(global_context, PLAN)
    commands = global_context.git_commands
    original = commands.delete_branch

    def flaky_delete(root, name):
        if name.endswith("-api"):
            raise GitError("Failed to delete branch", "locked")
        original(root, name)

    monkeypatch.setattr(commands, "delete_branch", flaky_delete)

    report = run_clean(global_context, CleanContext())

    assert report.removed == ["models"]
    assert list(report.failures) == ["api"]
    assert [c.name for c in MergesState.load(repo.path).chunks] == ["api"]
    assert repo.chunk_branches() == ["feat/big-chunk-2-api"]
