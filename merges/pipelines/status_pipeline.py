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

from merges.context import GlobalContext
from merges.core.data.reports import StatusRow
from merges.core.exceptions import GitError
from merges.core.state.state import MergesState
from merges.core.utils.naming import sync_status

MISSING_LABEL = "? missing"


class StatusPipeline:
    """Builds one status row per chunk: how far each branch trails the base branch."""

    def __init__(self, global_context: GlobalContext, state: MergesState, root: Path):
        self.global_context = global_context
        self.state = state
        self.root = root
        self.commands = global_context.git_commands

    def run(self) -> list[StatusRow]:
        rows = []
        for chunk in self.state.chunks:
            try:
                behind = self.commands.commits_behind(
                    self.root, chunk.branch, self.state.base_branch
                )
                label = sync_status(behind)
            except GitError as e:
                logger.debug(f"Could not compute sync status for {chunk.branch}: {e.message}")
                behind = None
                label = MISSING_LABEL

            rows.append(
                StatusRow(
                    name=chunk.name,
                    branch=chunk.branch,
                    files=len(chunk.files),
                    behind=behind,
                    label=label,
                    pr_number=chunk.pr_number,
                )
            )
        return rows
