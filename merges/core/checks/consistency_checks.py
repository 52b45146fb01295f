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

"""
Cross-checks between the declared chunk state and the live repository.

Each check returns a list of human readable issues and never touches the
repository. Only the state file exclusion can be repaired automatically;
missing branches and worktrees are reported, never recreated.
"""

from collections import Counter
from pathlib import Path

from loguru import logger

from merges.constants import STATE_FILE
from merges.core.data.reports import DoctorReport
from merges.core.git_commands.git_commands import GitCommands
from merges.core.state.state import MergesState


def check_branches_exist(commands: GitCommands, root: Path, state: MergesState) -> list[str]:
    return [
        f"Chunk branch '{chunk.branch}' does not exist locally."
        for chunk in state.chunks
        if not commands.branch_exists(root, chunk.branch)
    ]


def check_worktrees_exist(commands: GitCommands, root: Path, state: MergesState) -> list[str]:
    if not state.use_worktrees:
        return []
    issues = []
    for chunk in state.chunks:
        path = commands.worktree_path(root, chunk.branch)
        if not path.exists():
            issues.append(f"Worktree for branch '{chunk.branch}' missing at '{path}'.")
    return issues


def check_state_file_excluded(commands: GitCommands, root: Path) -> list[str]:
    if commands.is_excluded(root, STATE_FILE):
        return []
    return [
        f"{STATE_FILE} is not in .git/info/exclude; it may appear as an untracked file."
    ]


def check_unique_files(state: MergesState) -> list[str]:
    counts = Counter(file for chunk in state.chunks for file in chunk.files)
    return [
        f"File '{file}' appears in multiple chunks (duplicate in state, possibly corrupted)."
        for file, count in counts.items()
        if count > 1
    ]


def check_branch_contents(commands: GitCommands, root: Path, state: MergesState) -> list[str]:
    """Each existing chunk branch must touch exactly its declared files relative to base."""
    issues = []
    for chunk in state.chunks:
        if not commands.branch_exists(root, chunk.branch):
            continue
        actual = set(commands.changed_files(root, state.base_branch, chunk.branch))
        declared = set(chunk.files)
        if actual == declared:
            continue
        extra = sorted(actual - declared)
        missing = sorted(declared - actual)
        parts = []
        if missing:
            parts.append(f"missing {', '.join(missing)}")
        if extra:
            parts.append(f"unexpected {', '.join(extra)}")
        issues.append(
            f"Branch '{chunk.branch}' does not match chunk '{chunk.name}': {'; '.join(parts)}."
        )
    return issues


def diagnose(
    commands: GitCommands, root: Path, state: MergesState, repair: bool = False
) -> DoctorReport:
    report = DoctorReport()
    report.issues.extend(check_branches_exist(commands, root, state))
    report.issues.extend(check_worktrees_exist(commands, root, state))

    exclusion_issues = check_state_file_excluded(commands, root)
    if exclusion_issues and repair:
        commands.ensure_excluded(root, STATE_FILE)
        report.repaired.extend(exclusion_issues)
        logger.debug(f"Repaired: registered {STATE_FILE} in .git/info/exclude")
    else:
        report.issues.extend(exclusion_issues)

    report.issues.extend(check_unique_files(state))
    report.issues.extend(check_branch_contents(commands, root, state))
    return report
