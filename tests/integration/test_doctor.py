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

from merges.commands.doctor import run_doctor
from merges.commands.split import run_split
from merges.core.data.chunk_plan import ChunkPlan
from merges.core.state.state import Chunk


def split_models(global_context):
    return run_split(
        global_context,
        [ChunkPlan(name="models", files=["src/models/user.rs", "src/models/post.rs"])],
    )


def test_healthy_state_passes(repo, state, global_context):
    split_models(global_context)

    report = run_doctor(global_context)

    assert report.all_ok(), report.issues


def test_missing_branch_reported(repo, state, global_context):
    split_models(global_context)
    repo.git("branch", "-D", "feat/big-chunk-1-models")

    report = run_doctor(global_context)

    assert not report.all_ok()
    assert any("feat/big-chunk-1-models" in issue for issue in report.issues)


def test_missing_exclusion_reported_and_repaired(repo, state, global_context):
    exclude = repo.path / ".git" / "info" / "exclude"
    exclude.write_text("# git ls-files --others --exclude-from=.git/info/exclude\n")

    report = run_doctor(global_context)
    assert any(".merges.json" in issue for issue in report.issues)

    repaired = run_doctor(global_context, repair=True)
    assert repaired.all_ok(), repaired.issues
    assert repaired.repaired
    assert ".merges.json" in exclude.read_text().splitlines()

    assert run_doctor(global_context).all_ok()


def test_duplicate_file_in_state_reported(repo, make_state, global_context):
    make_state(
        chunks=[
            Chunk(name="a", branch="feat/big", files=["src/models/user.rs"]),
            Chunk(name="b", branch="feat/big", files=["src/models/user.rs"]),
        ]
    )
    global_context.git_commands.ensure_excluded(repo.path, ".merges.json")

    report = run_doctor(global_context)

    assert any("appears in multiple chunks" in issue for issue in report.issues)


def test_branch_content_mismatch_reported(repo, state, global_context):
    new_state = split_models(global_context)
    new_state.find_chunk("models").files.append("src/api/routes.rs")
    new_state.save(repo.path)

    report = run_doctor(global_context)

    assert any("missing src/api/routes.rs" in issue for issue in report.issues)


def test_missing_worktree_reported(repo, worktree_state, global_context):
    split_models(global_context)
    worktree = repo.path / ".git" / "merges-worktrees" / "feat-big-chunk-1-models"
    repo.git("worktree", "remove", "--force", str(worktree))

    report = run_doctor(global_context)

    assert any("Worktree for branch 'feat/big-chunk-1-models'" in i for i in report.issues)


def test_repair_never_recreates_branches(repo, state, global_context):
    split_models(global_context)
    repo.git("branch", "-D", "feat/big-chunk-1-models")

    report = run_doctor(global_context, repair=True)

    assert not report.all_ok()
    assert not repo.branch_exists("feat/big-chunk-1-models")
