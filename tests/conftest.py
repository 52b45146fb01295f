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

import subprocess
from pathlib import Path

import pytest

from merges.context import GlobalConfig, GlobalContext
from merges.core.state.state import MergesState

SOURCE_BRANCH = "feat/big"

FEATURE_FILES = {
    "src/models/user.rs": "pub struct User;\n",
    "src/models/post.rs": "pub struct Post;\n",
    "src/api/routes.rs": "pub fn routes() {}\n",
    "src/api/handlers.rs": "pub fn handlers() {}\n",
}


class GitRepo:
    """Small helper around a real temporary git repository."""

    def __init__(self, path: Path):
        self.path = path

    def git(self, *args: str, cwd: Path | None = None, check: bool = True) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd or self.path,
            capture_output=True,
            text=True,
            check=False,
        )
        if check and result.returncode != 0:
            raise AssertionError(
                f"git {' '.join(args)} failed: {result.stderr.strip()}"
            )
        return result.stdout.strip()

    def write(self, rel: str, content: str, cwd: Path | None = None) -> None:
        path = (cwd or self.path) / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def commit(self, message: str, cwd: Path | None = None) -> str:
        self.git("add", "-A", "--", ".", ":(exclude).merges.json", cwd=cwd)
        self.git("commit", "-q", "-m", message, cwd=cwd)
        return self.git("rev-parse", "HEAD", cwd=cwd)

    def current_branch(self) -> str:
        return self.git("rev-parse", "--abbrev-ref", "HEAD")

    def branch_exists(self, name: str) -> bool:
        return bool(self.git("branch", "--list", name))

    def tip(self, ref: str) -> str:
        return self.git("rev-parse", ref)

    def branch_files(self, branch: str, base: str = "main") -> list[str]:
        out = self.git("diff", "--name-only", f"{base}...{branch}")
        return sorted(line for line in out.splitlines() if line)

    def chunk_branches(self) -> list[str]:
        out = self.git("branch", "--list", "--format=%(refname:short)", f"{SOURCE_BRANCH}-chunk-*")
        return sorted(line for line in out.splitlines() if line)

    def advance_main(self, count: int, prefix: str = "base") -> None:
        """Add ``count`` commits to main and come back to the source branch."""
        current = self.current_branch()
        self.git("checkout", "-q", "main")
        for i in range(count):
            self.write(f"{prefix}_{i}.txt", f"{prefix} {i}\n")
            self.commit(f"{prefix} commit {i}")
        self.git("checkout", "-q", current)


@pytest.fixture(autouse=True)
def isolated_git_env(monkeypatch, tmp_path_factory):
    """Keep the user's git configuration out of the tests."""
    home = tmp_path_factory.mktemp("home")
    gitconfig = home / ".gitconfig"
    gitconfig.write_text(
        "[user]\n\tname = Merges Test\n\temail = test@example.com\n"
        "[commit]\n\tgpgsign = false\n"
        "[init]\n\tdefaultBranch = main\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    for key in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def repo(tmp_path) -> GitRepo:
    """
    A repository with one commit on ``main`` and a ``feat/big`` branch that
    adds four files under ``src/``.
    """
    path = tmp_path / "repo"
    path.mkdir()
    r = GitRepo(path)
    r.git("init", "-q")
    r.git("symbolic-ref", "HEAD", "refs/heads/main")
    r.write("README.md", "# project\n")
    r.commit("initial commit")

    r.git("checkout", "-q", "-b", SOURCE_BRANCH)
    for rel, content in FEATURE_FILES.items():
        r.write(rel, content)
    r.commit("big feature")
    return r


@pytest.fixture
def origin(repo, tmp_path) -> Path:
    """A bare remote named ``origin`` holding main and the source branch."""
    bare = tmp_path / "origin.git"
    repo.git("clone", "-q", "--bare", str(repo.path), str(bare), cwd=tmp_path)
    repo.git("remote", "add", "origin", str(bare))
    repo.git("fetch", "-q", "origin")
    return bare


@pytest.fixture
def push_to_origin_main(repo, origin):
    """Return a function committing files on top of origin/main from a separate clone."""

    clone = origin.parent / "other-clone"

    def push(files: dict[str, str], message: str) -> None:
        if not clone.exists():
            repo.git("clone", "-q", str(origin), str(clone), cwd=origin.parent)
        repo.git("checkout", "-q", "main", cwd=clone)
        repo.git("pull", "-q", "--ff-only", "origin", "main", cwd=clone)
        for rel, content in files.items():
            repo.write(rel, content, cwd=clone)
        repo.commit(message, cwd=clone)
        repo.git("push", "-q", "origin", "main", cwd=clone)

    return push


@pytest.fixture
def global_context(repo) -> GlobalContext:
    return GlobalContext.from_global_config(GlobalConfig(), repo.path)


@pytest.fixture
def make_state(repo):
    """Return a function that writes a fresh state file for the test repository."""

    def make(**overrides) -> MergesState:
        fields = {"base_branch": "main", "source_branch": SOURCE_BRANCH}
        fields.update(overrides)
        new_state = MergesState(**fields)
        new_state.save(repo.path)
        return new_state

    return make


@pytest.fixture
def state(make_state) -> MergesState:
    return make_state()


@pytest.fixture
def worktree_state(make_state) -> MergesState:
    return make_state(use_worktrees=True)
