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
from rich.table import Table

from merges.context import GlobalContext
from merges.core.data.reports import StatusRow
from merges.core.exceptions import handle_merges_exception
from merges.core.logging.logging import console
from merges.core.state.state import MergesState
from merges.pipelines.status_pipeline import StatusPipeline


def run_status(global_context: GlobalContext) -> tuple[MergesState, list[StatusRow]]:
    root = global_context.repo_root
    state = MergesState.load(root)
    return state, StatusPipeline(global_context, state, root).run()


def render_status(state: MergesState, rows: list[StatusRow]) -> Table:
    owner_repo = f"{state.repo_owner}/{state.repo_name}" if state.repo_owner else "local"
    table = Table(
        title=f"{owner_repo}: {state.source_branch} → {state.base_branch} ({state.strategy})"
    )
    table.add_column("#", justify="right")
    table.add_column("Chunk", style="bold")
    table.add_column("Branch", style="cyan")
    table.add_column("Sync")
    table.add_column("PR")
    table.add_column("Files", justify="right")

    for i, row in enumerate(rows, start=1):
        if row.behind is None:
            sync = f"[red]{row.label}[/red]"
        elif row.behind == 0:
            sync = f"[green]{row.label}[/green]"
        else:
            sync = f"[yellow]{row.label}[/yellow]"
        pr = f"#{row.pr_number}" if row.pr_number is not None else "-"
        table.add_row(str(i), row.name, row.branch, sync, pr, str(row.files))
    return table


def main(ctx: typer.Context) -> None:
    """Show every chunk and how far it is behind the base branch."""
    global_context: GlobalContext = ctx.obj

    with handle_merges_exception():
        state, rows = run_status(global_context)

    if not rows:
        logger.info("No chunks defined yet. Run `merges split` first.")
        return
    console.print(render_status(state, rows))
