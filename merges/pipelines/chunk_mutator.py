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

from pathlib import Path

from loguru import logger

from merges.constants import EMPTY_AFTER_MOVE_MESSAGE
from merges.context import AddContext, GlobalContext, MoveContext
from merges.core.exceptions import (
    DuplicateFileError,
    FileNotInChunkError,
    GitError,
    file_not_in_diff,
)
from merges.core.state.state import MergesState
from merges.core.transaction.undo_log import UndoLog


class ChunkMutator:
    """
    Post-hoc membership changes for chunks that already exist.

    Each operation amends the affected chunk branch commits and returns a new
    state; the input state is never modified in place.
    """

    def __init__(self, global_context: GlobalContext, state: MergesState, root: Path):
        self.global_context = global_context
        self.state = state
        self.root = root
        self.commands = global_context.git_commands
        self.workspace = global_context.working_context(state, root)

    def add_files(self, add_context: AddContext) -> MergesState:
        chunk = self.state.find_chunk(add_context.chunk)

        changed = set(
            self.commands.changed_files(
                self.root, self.state.base_branch, self.state.source_branch
            )
        )
        owners = self.state.assigned_files()
        new_files: list[str] = []
        for file in add_context.files:
            if file not in changed:
                raise file_not_in_diff(file, self.state.base_branch)
            owner = owners.get(file)
            if owner is not None and owner != chunk.name:
                raise DuplicateFileError(
                    f"File '{file}' is already assigned to chunk '{owner}'. "
                    f"Use `merges move` to reassign it."
                )
            if file not in chunk.files and file not in new_files:
                new_files.append(file)

        if not new_files:
            logger.info(f"All files are already in chunk '{chunk.name}'")
            return self.state

        with self.workspace.enter(self.commands, chunk.branch) as work_dir:
            self.commands.checkout_files_from(work_dir, self.state.source_branch, new_files)
            self.commands.amend_paths(work_dir, new_files)

        new_state = self.state.model_copy(deep=True)
        new_state.find_chunk(chunk.name).files.extend(new_files)
        logger.info(
            f"[green]✓[/green] Added {len(new_files)} file(s) to '{chunk.name}' ({chunk.branch})"
        )
        return new_state

    def move_file(self, move_context: MoveContext) -> MergesState:
        file = move_context.file
        src = self.state.find_chunk(move_context.from_chunk)
        dst = self.state.find_chunk(move_context.to_chunk)

        if file not in src.files:
            raise FileNotInChunkError(
                f"File '{file}' is not in chunk '{src.name}'. "
                f"Files in that chunk: {', '.join(src.files) or '(none)'}"
            )
        if src.name == dst.name:
            logger.info(f"File '{file}' is already in chunk '{dst.name}'")
            return self.state

        tips = {
            src.branch: self.commands.rev_parse(self.root, src.branch),
            dst.branch: self.commands.rev_parse(self.root, dst.branch),
        }

        undo = UndoLog()
        for branch, tip in tips.items():
            undo.push(f"reset {branch} to {tip[:7]}", self._reset_action(branch, tip))
        if not self.state.use_worktrees:
            undo.push(
                f"checkout {self.state.source_branch}",
                lambda: self.workspace.restore(self.commands),
            )

        try:
            with self.workspace.enter(self.commands, src.branch) as work_dir:
                self._remove_from_tip(work_dir, file)

            if file not in dst.files:
                with self.workspace.enter(self.commands, dst.branch) as work_dir:
                    self.commands.checkout_files_from(
                        work_dir, self.state.source_branch, [file]
                    )
                    self.commands.amend_paths(work_dir, [file])
        except Exception:
            undo.rollback()
            raise

        new_state = self.state.model_copy(deep=True)
        new_src = new_state.find_chunk(src.name)
        new_dst = new_state.find_chunk(dst.name)
        new_src.files = [f for f in new_src.files if f != file]
        if file not in new_dst.files:
            new_dst.files.append(file)

        logger.info(f"[green]✓[/green] Moved {file}: '{src.name}' → '{dst.name}'")
        return new_state

    def _remove_from_tip(self, work_dir: Path, file: str) -> None:
        """Rewrite the tip commit of the checked-out chunk without ``file``."""
        message = self.commands.head_message(work_dir)
        self.commands.soft_reset_parent(work_dir)
        self.commands.unstage(work_dir, file)
        self.commands.discard_path(work_dir, file)

        if self.commands.staged_files(work_dir):
            self.commands.commit_staged(work_dir, message)
        else:
            # keep the branch pointing at a commit of its own
            self.commands.commit_allow_empty(work_dir, EMPTY_AFTER_MOVE_MESSAGE)

    def _reset_action(self, branch: str, tip: str):
        def action() -> None:
            if self.state.use_worktrees:
                work_dir = self.workspace.directory_for(branch)
                if not work_dir.exists():
                    raise GitError(f"Worktree for '{branch}' is missing at {work_dir}")
                self.commands.reset_hard(work_dir, tip)
            else:
                self.commands.force_branch(self.root, branch, tip)

        return action
