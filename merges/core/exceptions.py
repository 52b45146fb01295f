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
Custom exception hierarchy for the merges CLI application.

This module defines the exception hierarchy used by every layer of merges.
Validation errors are always raised before any repository mutation, git
errors carry the failing operation and git's own output, and state errors
carry a remediation hint for the user.
"""

import contextlib
from collections.abc import Iterable, Mapping

import typer
from loguru import logger
from rich.markup import escape


class MergesError(Exception):
    """
    Base exception for all merges-related errors.

    All merges-specific exceptions should inherit from this class
    to enable consistent error handling throughout the application.
    """

    def __init__(self, message: str, details: str | None = None):
        """
        Initialize a MergesError.

        Args:
            message: Main error message for the user
            details: Additional technical details for logging
        """
        self.message = message
        self.details = details
        super().__init__(message)


class GitError(MergesError):
    """
    Errors related to git operations.

    Raised when a git command exits non-zero or when the repository
    state is invalid for the requested operation.
    """

    pass


class NothingToCommitError(GitError):
    """Raised when a commit is requested on a clean tree."""

    pass


class RebaseConflictError(GitError):
    """Raised when a rebase stops on conflicts and needs manual resolution."""

    pass


class ValidationError(MergesError):
    """
    Input validation errors.

    Raised when a plan or a chunk operation is rejected before
    anything in the repository has been touched.
    """

    pass


class EmptyPlanError(ValidationError):
    pass


class ChunkNotFoundError(ValidationError):
    pass


class FileNotInDiffError(ValidationError):
    pass


class DuplicateFileError(ValidationError):
    pass


class FileNotInChunkError(ValidationError):
    pass


class StateError(MergesError):
    """
    Errors reading or writing the persisted chunk state.

    Raised when .merges.json is missing or cannot be parsed.
    """

    pass


class ConfigurationError(MergesError):
    """
    Configuration-related errors.

    Raised when configuration files are invalid
    or contain incompatible settings.
    """

    pass


class SyncError(MergesError):
    """
    Errors during chunk synchronisation.

    Carries one entry per chunk whose rebase failed.
    """

    def __init__(self, failures: Mapping[str, str], details: str | None = None):
        self.failures = dict(failures)
        names = ", ".join(f"'{name}'" for name in self.failures)
        super().__init__(
            f"Failed to sync {len(self.failures)} chunk(s): {names}",
            details
            or "\n".join(f"{name}: {err}" for name, err in self.failures.items()),
        )


class RollbackError(MergesError):
    """
    A cleanup action failed while undoing a partially applied operation.

    These are logged, never raised in place of the original failure.
    """

    pass


def git_not_found() -> GitError:
    """Create a GitError for when git is not available."""
    return GitError(
        "Git is not installed or not in PATH",
        "Please install git and ensure it's available in your PATH environment variable",
    )


def not_git_repository(path: str = ".") -> GitError:
    """Create a GitError for when not in a git repository."""
    return GitError(
        f"Not a git repository: {path}",
        "Run 'git init' to initialize a git repository or navigate to an existing repository",
    )


def state_file_missing(path: str) -> StateError:
    """Create a StateError for a repository that has not been initialised."""
    return StateError(
        f"Could not read {path}. Run `merges init` first.",
        "The state file is created by `merges init` at the repository root",
    )


def state_file_invalid(path: str, reason: str) -> StateError:
    """Create a StateError for an unparseable state file."""
    return StateError(
        f"Failed to parse {path}",
        f"{reason}. Fix the JSON by hand or run `merges init` again",
    )


def chunk_not_found(name: str, available: Iterable[str]) -> ChunkNotFoundError:
    """Create a ChunkNotFoundError listing the chunks that do exist."""
    listed = ", ".join(available) or "(none)"
    return ChunkNotFoundError(
        f"No chunk named '{name}'. Available chunks: {listed}",
    )


def file_not_in_diff(file: str, base_branch: str, chunk: str | None = None) -> FileNotInDiffError:
    """Create a FileNotInDiffError for a file the source branch does not change."""
    where = f" in chunk '{chunk}'" if chunk else ""
    return FileNotInDiffError(
        f"File '{file}'{where} is not in the diff between '{base_branch}' and the source branch.",
        "Only files changed on the source branch can be assigned to chunks",
    )


@contextlib.contextmanager
def handle_merges_exception(exit_on_fail: bool = True):
    """
    Turn merges errors into a logged message and a non-zero exit code.

    Used around every command body so users see a clean error rather than
    a traceback. Details are only shown with --verbose and in the log file.
    """
    try:
        yield
    except MergesError as e:
        logger.error(f"[red]Error:[/red] {escape(e.message)}")
        if e.details:
            logger.debug(f"Details: {e.details}")
        if exit_on_fail:
            raise typer.Exit(1) from e
        raise
    except KeyboardInterrupt as e:
        logger.info("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130) from e
