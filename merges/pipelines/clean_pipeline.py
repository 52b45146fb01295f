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

from merges.context import CleanContext, GlobalContext
from merges.core.data.reports import CleanReport
from merges.core.exceptions import GitError
from merges.core.state.state import Chunk, MergesState


class CleanPipeline:
    """
    Deletes chunk branches (and their worktrees) and drops them from state.

    Chunks whose branch could not be removed stay in state so a later run,
    or ``merges doctor``, can pick them up again.
    """

    def __init__(
        self,
        global_context: GlobalContext,
        clean_context: CleanContext,
        state: MergesState,
        root: Path,
    ):
        self.global_context = global_context
        self.clean_context = clean_context
        self.state = state
        self.root = root
        self.commands = global_context.git_commands

    def targets(self) -> list[Chunk]:
        if not self.clean_context.chunks:
            return list(self.state.chunks)
        return [self.state.find_chunk(name) for name in self.clean_context.chunks]

    def run(self) -> tuple[MergesState, CleanReport]:
        report = CleanReport()
        targets = self.targets()

        if not self.state.use_worktrees:
            current = self.commands.current_branch(self.root)
            if current in {c.branch for c in targets}:
                logger.debug(f"Leaving {current} before deleting it")
                self.commands.checkout(self.root, self.state.source_branch)

        for chunk in targets:
            try:
                if self.state.use_worktrees:
                    self.commands.remove_worktree(self.root, chunk.branch)
                if self.commands.branch_exists(self.root, chunk.branch):
                    self.commands.delete_branch(self.root, chunk.branch)
            except GitError as e:
                logger.error(f"[red]✗[/red] {chunk.branch}: {e.message}")
                report.failures[chunk.name] = e.message
                continue
            report.removed.append(chunk.name)
            logger.info(f"[green]✓[/green] Deleted {chunk.branch}")

        new_state = self.state.model_copy(deep=True)
        new_state.chunks = [c for c in new_state.chunks if c.name not in report.removed]
        return new_state, report
