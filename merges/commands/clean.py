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

from merges.context import CleanContext, GlobalContext
from merges.core.data.reports import CleanReport
from merges.core.exceptions import MergesError, handle_merges_exception
from merges.core.state.state import MergesState
from merges.pipelines.clean_pipeline import CleanPipeline


def run_clean(
    global_context: GlobalContext,
    clean_context: CleanContext,
    confirm=None,
) -> CleanReport:
    """
    Delete chunk branches and drop them from state.

    ``confirm`` receives the branches about to be deleted and returns
    whether to go ahead; without one, deletion proceeds.
    """
    root = global_context.repo_root
    state = MergesState.load(root)

    pipeline = CleanPipeline(global_context, clean_context, state, root)
    targets = pipeline.targets()
    if not targets:
        logger.info("No chunks to clean.")
        return CleanReport()

    if confirm is not None and not confirm([c.branch for c in targets]):
        raise MergesError("Aborted.")

    new_state, report = pipeline.run()
    new_state.save(root)
    return report


def main(
    ctx: typer.Context,
    chunks: list[str] | None = typer.Argument(
        None, help="Chunks to clean. Defaults to all chunks."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Delete chunk branches (and worktrees) and remove them from state."""
    global_context: GlobalContext = ctx.obj
    skip_prompt = yes or global_context.config.auto_accept

    def confirm(branches: list[str]) -> bool:
        logger.info(f"{len(branches)} chunk branch(es) will be deleted:")
        for branch in branches:
            logger.info(f"  • [cyan]{branch}[/cyan]")
        if skip_prompt:
            return True
        return typer.confirm("Delete these branches?", default=False)

    with handle_merges_exception():
        report = run_clean(global_context, CleanContext(chunks=tuple(chunks or ())), confirm)

    if report.removed:
        logger.success(f"[green]✓[/green] Cleaned {len(report.removed)} chunk(s)")
    if not report.all_ok():
        for name, error in report.failures.items():
            logger.error(f"Could not clean '{name}': {error}")
        raise typer.Exit(1)
