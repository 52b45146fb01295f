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
from dataclasses import dataclass, field
from pathlib import Path

from merges.constants import DEFAULT_REMOTE
from merges.core.data.chunk_plan import ChunkPlan
from merges.core.data.working_context import WorkingContext
from merges.core.exceptions import ConfigurationError
from merges.core.git_commands.git_commands import GitCommands
from merges.core.git_interface.interface import GitInterface
from merges.core.git_interface.SubprocessGitInterface import (
    SubprocessGitInterface,
)
from merges.core.state.state import MergesState


@dataclass
class GlobalConfig:
    verbose: bool = False
    silent: bool = False
    auto_accept: bool = False
    remote: str = DEFAULT_REMOTE
    max_parallel_syncs: int = 8

    descriptions = {
        "verbose": "Enable verbose logging output",
        "silent": "Do not output any text to the console, except for errors and prompts",
        "auto_accept": "Automatically accept all prompts without user confirmation",
        "remote": "Remote that chunk branches are fetched from and rebased onto",
        "max_parallel_syncs": "Upper bound on concurrent rebases when chunks use worktrees",
    }

    def __post_init__(self):
        if self.max_parallel_syncs < 1:
            raise ConfigurationError(
                f"max_parallel_syncs must be at least 1, got {self.max_parallel_syncs}"
            )
        if not self.remote.strip():
            raise ConfigurationError("remote must not be empty")


@dataclass(frozen=True)
class GlobalContext:
    repo_path: Path
    git_interface: GitInterface
    git_commands: GitCommands
    config: GlobalConfig

    @classmethod
    def from_global_config(cls, config: GlobalConfig, repo_path: Path):
        git_interface = SubprocessGitInterface(repo_path)
        git_commands = GitCommands(git_interface)

        return GlobalContext(repo_path, git_interface, git_commands, config)

    @property
    def repo_root(self) -> Path:
        return self.git_commands.repo_root(self.repo_path)

    def working_context(self, state: MergesState, root: Path) -> WorkingContext:
        return WorkingContext(root, state.source_branch, state.use_worktrees)


@dataclass(frozen=True)
class InitContext:
    base_branch: str
    strategy: str = "stacked"
    use_worktrees: bool = False
    commit_prefix: str | None = None
    force: bool = False


@dataclass(frozen=True)
class SplitContext:
    plan: Sequence[ChunkPlan]


@dataclass(frozen=True)
class AddContext:
    chunk: str
    files: Sequence[str]


@dataclass(frozen=True)
class MoveContext:
    file: str
    from_chunk: str
    to_chunk: str


@dataclass(frozen=True)
class CleanContext:
    chunks: Sequence[str] = field(default_factory=tuple)
