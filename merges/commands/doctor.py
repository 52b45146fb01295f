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
from merges.core.checks.consistency_checks import diagnose
from merges.core.data.reports import DoctorReport
from merges.core.exceptions import handle_merges_exception
from merges.core.state.state import MergesState


def run_doctor(global_context: GlobalContext, repair: bool = False) -> DoctorReport:
    root = global_context.repo_root
    state = MergesState.load(root)
    return diagnose(global_context.git_commands, root, state, repair=repair)


def main(
    ctx: typer.Context,
    repair: bool = typer.Option(
        False, "--repair", help="Fix issues that can be repaired automatically."
    ),
) -> None:
    """Check that the chunk state matches the repository."""
    global_context: GlobalContext = ctx.obj

    with handle_merges_exception():
        report = run_doctor(global_context, repair=repair)

    for fixed in report.repaired:
        logger.info(f"[green]✓[/green] Repaired: {fixed}")

    if report.all_ok():
        logger.success("[green]✓[/green] All checks passed. State is healthy.")
        return

    for issue in report.issues:
        logger.warning(f"[yellow]![/yellow] {issue}")
    if not repair:
        logger.info("Run `merges doctor --repair` to fix what can be fixed automatically.")
    raise typer.Exit(1)
