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

import pytest

from merges.context import GlobalConfig, GlobalContext
from merges.core.exceptions import ConfigurationError
from merges.core.git_commands.git_commands import GitCommands
from merges.core.git_interface.SubprocessGitInterface import SubprocessGitInterface
from merges.core.state.state import MergesState


def test_default_config():
    config = GlobalConfig()

    assert config.remote == "origin"
    assert config.max_parallel_syncs == 8
    assert config.auto_accept is False
    assert set(GlobalConfig.descriptions) == {
        "verbose",
        "silent",
        "auto_accept",
        "remote",
        "max_parallel_syncs",
    }


@pytest.mark.parametrize("overrides", [{"max_parallel_syncs": 0}, {"remote": "  "}])
def test_invalid_config(overrides):
    with pytest.raises(ConfigurationError):
        GlobalConfig(**overrides)


def test_from_global_config(tmp_path):
    context = GlobalContext.from_global_config(GlobalConfig(), tmp_path)

    assert isinstance(context.git_interface, SubprocessGitInterface)
    assert isinstance(context.git_commands, GitCommands)
    assert context.git_commands.git is context.git_interface
    assert context.repo_path == tmp_path


def test_working_context_follows_state(tmp_path):
    context = GlobalContext.from_global_config(GlobalConfig(), tmp_path)
    state = MergesState(base_branch="main", source_branch="feat", use_worktrees=True)

    working = context.working_context(state, Path("/repo"))

    assert working.use_worktrees is True
    assert working.source_branch == "feat"
    assert working.directory_for("feat-chunk-1-a") == Path(
        "/repo/.git/merges-worktrees/feat-chunk-1-a"
    )
