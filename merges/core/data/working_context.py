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

import contextlib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from merges.core.exceptions import GitError
from merges.core.git_commands.git_commands import GitCommands


@dataclass(frozen=True)
class WorkingContext:
    """
    Where chunk branches are operated on.

    In shared-tree mode every chunk is checked out in turn inside ``root`` and
    the source branch is restored afterwards. In worktree mode each chunk has
    its own directory and nothing is ever checked out in ``root``.
    """

    root: Path
    source_branch: str
    use_worktrees: bool

    def directory_for(self, branch: str) -> Path:
        if self.use_worktrees:
            return GitCommands.worktree_path(self.root, branch)
        return self.root

    @contextlib.contextmanager
    def enter(self, commands: GitCommands, branch: str) -> Iterator[Path]:
        """Yield a directory in which ``branch`` is checked out."""
        if self.use_worktrees:
            path = self.directory_for(branch)
            if not path.exists():
                raise GitError(
                    f"Worktree for '{branch}' is missing at {path}",
                    "Run `merges doctor` to inspect the repository",
                )
            yield path
            return

        commands.checkout(self.root, branch)
        try:
            yield self.root
        except BaseException:
            try:
                commands.checkout(self.root, self.source_branch, force=True)
            except GitError as restore_error:
                logger.warning(
                    f"Could not return to {self.source_branch}: {restore_error.message}"
                )
            raise
        else:
            commands.checkout(self.root, self.source_branch)

    def restore(self, commands: GitCommands) -> None:
        """Force the shared tree back onto the source branch."""
        if not self.use_worktrees:
            commands.checkout(self.root, self.source_branch, force=True)
