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

from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from merges.constants import STATE_FILE
from merges.context import GlobalContext, SplitContext
from merges.core.data.chunk_plan import ChunkPlan
from merges.core.exceptions import (
    DuplicateFileError,
    EmptyPlanError,
    ValidationError,
    file_not_in_diff,
)
from merges.core.logging.utils import time_block
from merges.core.state.state import Chunk, MergesState
from merges.core.transaction.undo_log import UndoLog
from merges.core.utils.naming import (
    chunk_branch_name,
    chunk_commit_message,
    format_message,
)


def validate_plan(
    plan: Sequence[ChunkPlan], state: MergesState, changed: Sequence[str]
) -> None:
    """
    Reject a plan before anything in the repository is touched.

    The plan must be non-empty, every entry must name at least one file, every
    file must be in the source branch's diff, and no file may appear twice
    (inside the plan or against chunks that already exist).
    """
    if not plan:
        raise EmptyPlanError(
            "Chunk plan is empty. Provide at least one chunk with files."
        )

    changed_set = set(changed)
    owners = state.assigned_files()
    existing_names = set(state.chunk_names())
    seen_names: set[str] = set()
    seen_files: dict[str, str] = {}

    for entry in plan:
        if not entry.files:
            raise EmptyPlanError(f"Chunk '{entry.name}' has no files.")

        if entry.name in existing_names or entry.name in seen_names:
            raise ValidationError(f"A chunk named '{entry.name}' already exists.")
        seen_names.add(entry.name)

        for file in entry.files:
            if file not in changed_set:
                raise file_not_in_diff(file, state.base_branch, entry.name)
            if file in owners:
                raise DuplicateFileError(
                    f"File '{file}' is already assigned to chunk '{owners[file]}'."
                )
            if file in seen_files:
                raise DuplicateFileError(
                    f"File '{file}' appears in both '{seen_files[file]}' and '{entry.name}'."
                    if seen_files[file] != entry.name
                    else f"File '{file}' is listed twice in chunk '{entry.name}'."
                )
            seen_files[file] = entry.name


class SplitPipeline:
    """
    Materializes a plan as one branch (or worktree) per chunk.

    Every chunk branch starts from the merge-base of the source and base
    branches and receives exactly its own files from the source branch. If
    any step fails, everything created by this run is removed again and the
    input state is left as it was.
    """

    def __init__(
        self,
        global_context: GlobalContext,
        split_context: SplitContext,
        state: MergesState,
        root: Path,
    ):
        self.global_context = global_context
        self.split_context = split_context
        self.state = state
        self.root = root
        self.commands = global_context.git_commands

    def run(self) -> MergesState:
        plan = list(self.split_context.plan)
        source = self.state.source_branch
        base = self.state.base_branch

        with time_block("Plan validation"):
            changed = self.commands.changed_files(self.root, base, source)
            validate_plan(plan, self.state, changed)

        self.commands.ensure_excluded(self.root, STATE_FILE)
        base_sha = self.commands.merge_base(self.root, base, source)
        logger.debug(f"Materializing {len(plan)} chunk(s) from merge base {base_sha[:7]}")

        undo = UndoLog()
        new_chunks: list[Chunk] = []
        try:
            with time_block("Chunk materialization"):
                for entry in plan:
                    new_chunks.append(self._materialize(entry, base_sha, len(new_chunks), undo))
        except Exception:
            errors = undo.rollback()
            if errors:
                logger.warning(
                    f"{len(errors)} cleanup step(s) failed; some branches may need manual removal"
                )
            raise

        new_state = self.state.model_copy(deep=True)
        new_state.chunks.extend(new_chunks)
        return new_state

    def _materialize(
        self, entry: ChunkPlan, base_sha: str, created: int, undo: UndoLog
    ) -> Chunk:
        ordinal = len(self.state.chunks) + created + 1
        branch = chunk_branch_name(self.state.source_branch, ordinal, entry.name)
        use_worktrees = self.state.use_worktrees

        if use_worktrees:
            work_dir = self.commands.add_worktree(self.root, branch, base_sha)
            undo.push(
                f"delete branch {branch}",
                lambda: self.commands.delete_branch(self.root, branch),
            )
            undo.push(
                f"remove worktree {work_dir}",
                lambda: self.commands.remove_worktree(self.root, branch),
            )
        else:
            self.commands.create_branch(self.root, branch, base_sha)
            work_dir = self.root
            undo.push(
                f"delete branch {branch}",
                lambda: self.commands.delete_branch(self.root, branch),
            )
            undo.push(
                f"checkout {self.state.source_branch}",
                lambda: self.commands.checkout(
                    self.root, self.state.source_branch, force=True
                ),
            )

        self.commands.checkout_files_from(work_dir, self.state.source_branch, entry.files)
        message = format_message(
            self.state.source_branch,
            chunk_commit_message(entry.name, ordinal, list(entry.files)),
            self.state.commit_prefix,
        )
        self.commands.commit_paths(work_dir, message, list(entry.files))

        if not use_worktrees:
            self.commands.checkout(self.root, self.state.source_branch)

        logger.info(f"[green]✓[/green] Created {branch} ({len(entry.files)} file(s))")
        return Chunk(name=entry.name, branch=branch, files=list(entry.files))
