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
Persisted chunk state.

The state file (``.merges.json``) lives at the repository root and is the
single source of truth for how the source branch has been decomposed. It is
loaded and saved around every command as one read-modify-write unit; there
is no locking because only one merges process is expected per repository.
"""

from enum import Enum
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from merges.constants import STATE_FILE
from merges.core.exceptions import (
    StateError,
    chunk_not_found,
    state_file_invalid,
    state_file_missing,
)


class Strategy(str, Enum):
    STACKED = "stacked"
    INDEPENDENT = "independent"

    def __str__(self) -> str:
        return self.value


class Chunk(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    branch: str
    files: list[str] = Field(default_factory=list)
    pr_number: int | None = None
    pr_url: str | None = None


class MergesState(BaseModel):
    # unknown keys from newer or older writers are tolerated
    model_config = ConfigDict(extra="ignore")

    base_branch: str
    source_branch: str
    repo_owner: str = ""
    repo_name: str = ""
    strategy: Strategy = Strategy.STACKED
    use_worktrees: bool = False
    commit_prefix: str | None = None
    chunks: list[Chunk] = Field(default_factory=list)

    @staticmethod
    def path(repo_root: Path) -> Path:
        return Path(repo_root) / STATE_FILE

    @classmethod
    def exists(cls, repo_root: Path) -> bool:
        return cls.path(repo_root).is_file()

    @classmethod
    def load(cls, repo_root: Path) -> "MergesState":
        path = cls.path(repo_root)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise state_file_missing(STATE_FILE) from e
        except OSError as e:
            raise StateError(f"Could not read {STATE_FILE}: {e}") from e

        try:
            state = cls.model_validate_json(content)
        except PydanticValidationError as e:
            raise state_file_invalid(STATE_FILE, str(e)) from e

        logger.debug(
            "Loaded state: source={source} base={base} chunks={n}",
            source=state.source_branch,
            base=state.base_branch,
            n=len(state.chunks),
        )
        return state

    def save(self, repo_root: Path) -> None:
        path = self.path(repo_root)
        content = self.model_dump_json(indent=2, exclude_none=True) + "\n"
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StateError(f"Failed to write {path}: {e}") from e
        logger.debug(f"Saved state to {path}")

    def chunk_names(self) -> list[str]:
        return [c.name for c in self.chunks]

    def find_chunk(self, name: str) -> Chunk:
        for chunk in self.chunks:
            if chunk.name == name:
                return chunk
        raise chunk_not_found(name, self.chunk_names())

    def assigned_files(self) -> dict[str, str]:
        """Map every assigned file to the name of the (first) chunk that owns it."""
        owners: dict[str, str] = {}
        for chunk in self.chunks:
            for file in chunk.files:
                owners.setdefault(file, chunk.name)
        return owners
