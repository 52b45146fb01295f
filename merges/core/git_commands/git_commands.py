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

import re
from pathlib import Path

from loguru import logger

from merges.constants import DEFAULT_REMOTE, WORKTREE_DIR_NAME
from merges.core.exceptions import (
    GitError,
    NothingToCommitError,
    RebaseConflictError,
    not_git_repository,
)
from merges.core.git_interface.interface import GitInterface

_HTTPS_REMOTE_RE = re.compile(r"^https?://[^/]+/(?P<owner>[^/]+)/(?P<repo>[^/]+)$")
_SSH_REMOTE_RE = re.compile(r"^(?:ssh://)?[^@/]+@[^:/]+[:/](?P<owner>[^/]+)/(?P<repo>[^/]+)$")
_NOTHING_TO_COMMIT = ("nothing to commit", "nothing added to commit", "no changes added to commit")


def parse_remote_url(url: str) -> tuple[str, str] | None:
    """
    Parse ``owner`` and ``repo`` out of a hosted remote URL.

    Accepts https (``https://github.com/owner/repo.git``) and ssh
    (``git@github.com:owner/repo.git``) forms. Returns None for anything else.
    """
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]

    for pattern in (_HTTPS_REMOTE_RE, _SSH_REMOTE_RE):
        match = pattern.match(url)
        if match:
            return match.group("owner"), match.group("repo")
    return None


class GitCommands:
    """
    Atomic version-control primitives used by every higher merges operation.

    Each method takes the directory it operates in, because in worktree mode
    "the repository" is a different directory per chunk. Any non-zero exit
    is raised as a GitError naming the operation, with git's output as details.
    """

    def __init__(self, git: GitInterface):
        self.git = git

    # -------------------------------
    # Internal helpers
    # -------------------------------

    def _run(self, cwd: Path, args: list[str], action: str) -> str:
        result = self.git.run_git_text(args, cwd=cwd)
        if result.returncode != 0:
            output = (result.stderr or "").strip() or (result.stdout or "").strip()
            raise GitError(f"Failed to {action}", output or None)
        return result.stdout or ""

    def _succeeds(self, cwd: Path, args: list[str]) -> bool:
        return self.git.run_git_text(args, cwd=cwd).returncode == 0

    @staticmethod
    def _lines(output: str) -> list[str]:
        return [line.strip() for line in output.splitlines() if line.strip()]

    # -------------------------------
    # Repository facts
    # -------------------------------

    def repo_root(self, cwd: Path) -> Path:
        out = self.git.run_git_text_out(["rev-parse", "--show-toplevel"], cwd=cwd)
        if out is None:
            raise not_git_repository(str(cwd))
        return Path(out.strip())

    def git_dir(self, cwd: Path) -> Path:
        """Return the common .git directory, shared by all worktrees."""
        out = self._run(cwd, ["rev-parse", "--git-common-dir"], "locate the .git directory")
        path = Path(out.strip())
        if not path.is_absolute():
            path = Path(cwd) / path
        return path.resolve()

    def current_branch(self, cwd: Path) -> str:
        out = self._run(cwd, ["rev-parse", "--abbrev-ref", "HEAD"], "read the current branch")
        return out.strip()

    def branch_exists(self, cwd: Path, name: str) -> bool:
        return self._succeeds(cwd, ["rev-parse", "--verify", "--quiet", f"refs/heads/{name}"])

    def rev_parse(self, cwd: Path, ref: str) -> str:
        out = self._run(cwd, ["rev-parse", "--verify", ref], f"resolve '{ref}'")
        return out.strip()

    def file_exists_at(self, cwd: Path, ref: str, path: str) -> bool:
        return self._succeeds(cwd, ["cat-file", "-e", f"{ref}:{path}"])

    def changed_files(self, cwd: Path, base_branch: str, tip: str = "HEAD") -> list[str]:
        """Files touched on ``tip`` since it diverged from ``base_branch``."""
        out = self._run(
            cwd,
            ["diff", "--name-only", f"{base_branch}...{tip}"],
            f"diff '{tip}' against '{base_branch}'",
        )
        return self._lines(out)

    def merge_base(self, cwd: Path, base_branch: str, tip: str = "HEAD") -> str:
        out = self._run(
            cwd,
            ["merge-base", base_branch, tip],
            f"find merge base of '{base_branch}' and '{tip}'",
        )
        return out.strip()

    def commits_behind(self, root: Path, branch: str, base_branch: str) -> int:
        if not self.branch_exists(root, branch):
            raise GitError(f"Branch '{branch}' does not exist")
        out = self._run(
            root,
            ["rev-list", "--count", f"{branch}..{base_branch}"],
            f"count commits between '{branch}' and '{base_branch}'",
        )
        return int(out.strip() or 0)

    # -------------------------------
    # Branches and working tree
    # -------------------------------

    def create_branch(self, cwd: Path, name: str, base_ref: str) -> None:
        self._run(cwd, ["checkout", "-b", name, base_ref], f"create branch '{name}'")

    def checkout(self, cwd: Path, name: str, force: bool = False) -> None:
        args = ["checkout"] + (["--force"] if force else []) + [name]
        self._run(cwd, args, f"checkout '{name}'")

    def delete_branch(self, root: Path, name: str) -> None:
        self._run(root, ["branch", "-D", name], f"delete branch '{name}'")

    def checkout_files_from(self, cwd: Path, source_ref: str, paths: list[str]) -> None:
        """
        Overwrite ``paths`` in the working tree with their content at ``source_ref``.

        Paths that do not exist at ``source_ref`` (deleted on the source branch)
        are removed from the index and the working tree instead.
        """
        if not paths:
            return

        present_out = self._run(
            cwd,
            ["ls-tree", "-r", "--name-only", source_ref, "--"] + paths,
            f"list files at '{source_ref}'",
        )
        present = set(self._lines(present_out))
        to_checkout = [p for p in paths if p in present]
        to_remove = [p for p in paths if p not in present]

        if to_checkout:
            self._run(
                cwd,
                ["checkout", source_ref, "--"] + to_checkout,
                f"checkout files from '{source_ref}'",
            )
        if to_remove:
            logger.debug(f"Removing files deleted on {source_ref}: {to_remove}")
            self._run(
                cwd,
                ["rm", "-q", "-f", "--ignore-unmatch", "--"] + to_remove,
                "remove deleted files",
            )

    # -------------------------------
    # Commits
    # -------------------------------

    def commit_paths(self, cwd: Path, message: str, paths: list[str]) -> None:
        """
        Commit the working-tree content of ``paths`` and nothing else.

        Other staged, modified or untracked files in ``cwd`` stay out of the
        commit and are left untouched.
        """
        result = self.git.run_git_text(["commit", "-m", message, "--"] + paths, cwd=cwd)
        if result.returncode != 0:
            output = f"{result.stdout or ''}\n{result.stderr or ''}".strip()
            if any(marker in output for marker in _NOTHING_TO_COMMIT):
                raise NothingToCommitError(f"Nothing to commit in {cwd}", output)
            raise GitError("Failed to commit", output or None)

    def amend_paths(self, cwd: Path, paths: list[str]) -> None:
        """Fold the working-tree content of ``paths`` into the tip commit."""
        self._run(cwd, ["commit", "--amend", "--no-edit", "--"] + paths, "amend commit")

    def commit_staged(self, cwd: Path, message: str) -> None:
        self._run(cwd, ["commit", "-m", message], "commit staged changes")

    def commit_allow_empty(self, cwd: Path, message: str) -> None:
        self._run(cwd, ["commit", "--allow-empty", "-m", message], "create empty commit")

    def head_message(self, cwd: Path) -> str:
        out = self._run(cwd, ["log", "-1", "--format=%B"], "read the tip commit message")
        return out.strip()

    def soft_reset_parent(self, cwd: Path) -> None:
        self._run(cwd, ["reset", "--soft", "HEAD~1"], "soft reset to parent commit")

    def reset_hard(self, cwd: Path, ref: str) -> None:
        self._run(cwd, ["reset", "--hard", ref], f"reset to '{ref}'")

    def unstage(self, cwd: Path, path: str) -> None:
        self._run(cwd, ["reset", "-q", "HEAD", "--", path], f"unstage '{path}'")

    def discard_path(self, cwd: Path, path: str) -> None:
        """Restore ``path`` to its HEAD content, or delete it if HEAD does not have it."""
        if self.file_exists_at(cwd, "HEAD", path):
            self._run(cwd, ["checkout", "HEAD", "--", path], f"discard changes to '{path}'")
        else:
            (Path(cwd) / path).unlink(missing_ok=True)

    def staged_files(self, cwd: Path) -> list[str]:
        out = self._run(cwd, ["diff", "--cached", "--name-only"], "list staged files")
        return self._lines(out)

    # -------------------------------
    # Remote sync
    # -------------------------------

    def fetch(self, cwd: Path, remote: str = DEFAULT_REMOTE) -> None:
        self._run(cwd, ["fetch", remote], f"fetch from '{remote}'")

    def rebase(self, cwd: Path, onto: str, update_refs: bool = False) -> None:
        args = ["rebase"] + (["--update-refs"] if update_refs else []) + [onto]
        result = self.git.run_git_text(args, cwd=cwd)
        if result.returncode == 0:
            return
        output = f"{result.stdout or ''}\n{result.stderr or ''}".strip()
        if "CONFLICT" in output or "could not apply" in output:
            raise RebaseConflictError(
                f"Rebase onto '{onto}' stopped on conflicts in {cwd}. "
                "Resolve them, run `git rebase --continue`, then sync again.",
                output,
            )
        raise GitError(f"Failed to rebase onto '{onto}'", output or None)

    def fetch_and_rebase(
        self,
        cwd: Path,
        base_branch: str,
        cascade_refs: bool,
        remote: str = DEFAULT_REMOTE,
    ) -> None:
        self.fetch(cwd, remote)
        self.rebase(cwd, f"{remote}/{base_branch}", update_refs=cascade_refs)

    def remote_url(self, root: Path, remote: str = DEFAULT_REMOTE) -> str | None:
        out = self.git.run_git_text_out(["remote", "get-url", remote], cwd=root)
        return out.strip() if out else None

    def remote_owner_repo(self, root: Path, remote: str = DEFAULT_REMOTE) -> tuple[str, str] | None:
        url = self.remote_url(root, remote)
        if not url:
            return None
        return parse_remote_url(url)

    # -------------------------------
    # Worktrees
    # -------------------------------

    @staticmethod
    def worktree_path(root: Path, branch: str) -> Path:
        return Path(root) / ".git" / WORKTREE_DIR_NAME / branch.replace("/", "-")

    def add_worktree(self, root: Path, branch: str, base_ref: str) -> Path:
        path = self.worktree_path(root, branch)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._run(
            root,
            ["worktree", "add", "-b", branch, str(path), base_ref],
            f"add worktree for '{branch}'",
        )
        return path

    def remove_worktree(self, root: Path, branch: str) -> None:
        path = self.worktree_path(root, branch)
        if not path.exists():
            return
        self._run(
            root,
            ["worktree", "remove", "--force", str(path)],
            f"remove worktree for '{branch}'",
        )

    # -------------------------------
    # Repository setup
    # -------------------------------

    def _exclude_file(self, root: Path) -> Path:
        return self.git_dir(root) / "info" / "exclude"

    def is_excluded(self, root: Path, pattern: str) -> bool:
        exclude = self._exclude_file(root)
        if not exclude.exists():
            return False
        lines = exclude.read_text(encoding="utf-8").splitlines()
        return any(line.strip() == pattern for line in lines)

    def ensure_excluded(self, root: Path, pattern: str) -> bool:
        """
        Append ``pattern`` to .git/info/exclude unless an identical line exists.

        Returns True when the file was modified.
        """
        if self.is_excluded(root, pattern):
            return False

        exclude = self._exclude_file(root)
        exclude.parent.mkdir(parents=True, exist_ok=True)
        existing = exclude.read_text(encoding="utf-8") if exclude.exists() else ""
        separator = "\n" if existing and not existing.endswith("\n") else ""
        with exclude.open("a", encoding="utf-8") as f:
            f.write(f"{separator}{pattern}\n")
        logger.debug(f"Registered {pattern} in {exclude}")
        return True

    def enable_rerere(self, root: Path) -> None:
        self._run(root, ["config", "rerere.enabled", "true"], "enable rerere")
        self._run(root, ["config", "rerere.autoupdate", "true"], "enable rerere autoupdate")

    def force_branch(self, root: Path, name: str, ref: str) -> None:
        """Move a branch that is not checked out to ``ref``."""
        self._run(root, ["branch", "-f", name, ref], f"reset branch '{name}' to '{ref}'")
