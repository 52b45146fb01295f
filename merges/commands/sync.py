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

import typer
from loguru import logger

from merges.context import GlobalContext
from merges.core.data.reports import SyncReport
from merges.core.exceptions import handle_merges_exception
from merges.core.logging.utils import time_block
from merges.core.state.state import MergesState
from merges.pipelines.sync_pipeline import SyncPipeline


def run_sync(global_context: GlobalContext) -> SyncReport:
    root = global_context.repo_root
    state = MergesState.load(root)

    mode = "parallel worktrees" if state.use_worktrees else "shared tree"
    logger.info(
        f"Syncing {len(state.chunks)} chunk(s) onto "
        f"{global_context.config.remote}/{state.base_branch} ({state.strategy}, {mode})"
    )
    with time_block("Sync E2E"):
        return SyncPipeline(global_context, state, root).run()


def main(ctx: typer.Context) -> None:
    """Rebase every chunk branch onto the latest base branch.

    Conflicts are not resolved automatically: fix them in the chunk branch,
    run `git rebase --continue`, then sync again.
    """
    global_context: GlobalContext = ctx.obj

    with handle_merges_exception():
        report = run_sync(global_context)

    if report.synced:
        logger.success(f"[green]✓[/green] Synced {len(report.synced)} chunk(s)")
