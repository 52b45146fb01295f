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

import typer
from loguru import logger
from rich.table import Table

from merges.context import GlobalContext, SplitContext
from merges.core.data.chunk_plan import ChunkPlan, parse_plan
from merges.core.exceptions import ValidationError, handle_merges_exception
from merges.core.grouper.auto_grouper import auto_group
from merges.core.logging.logging import console
from merges.core.logging.utils import log_state
from merges.core.state.state import MergesState
from merges.pipelines.split_pipeline import SplitPipeline


def run_split(
    global_context: GlobalContext, plan: list[ChunkPlan], state: MergesState | None = None
) -> MergesState:
    root = global_context.repo_root
    state = state or MergesState.load(root)

    new_state = SplitPipeline(global_context, SplitContext(plan), state, root).run()
    new_state.save(root)
    log_state("Split", new_state)
    return new_state


def auto_plan(global_context: GlobalContext, state: MergesState) -> list[ChunkPlan]:
    """Group the source branch's unassigned changes by directory."""
    root = global_context.repo_root
    changed = global_context.git_commands.changed_files(
        root, state.base_branch, state.source_branch
    )
    assigned = state.assigned_files()
    return auto_group([f for f in changed if f not in assigned])


def _show_changed_files(global_context: GlobalContext, state: MergesState) -> None:
    root = global_context.repo_root
    changed = global_context.git_commands.changed_files(
        root, state.base_branch, state.source_branch
    )
    assigned = state.assigned_files()

    table = Table(title=f"Changes on {state.source_branch} vs {state.base_branch}")
    table.add_column("File")
    table.add_column("Chunk")
    for file in changed:
        table.add_row(file, assigned.get(file, "[dim]unassigned[/dim]"))
    console.print(table)
    logger.info("Pass --plan, --plan-file or --auto to create chunks.")


def main(
    ctx: typer.Context,
    plan: str | None = typer.Option(
        None,
        "--plan",
        help='Chunk plan as JSON: [{"name": "models", "files": ["src/a.py"]}]',
    ),
    plan_file: Path | None = typer.Option(
        None,
        "--plan-file",
        help="Path to a file containing the chunk plan as JSON.",
    ),
    auto: bool = typer.Option(
        False,
        "--auto",
        help="Group unassigned changes by directory structure.",
    ),
) -> None:
    """Split the source branch into chunk branches.

    Examples:
        # Group changed files by directory
        merges split --auto

        # Use an explicit plan
        merges split --plan '[{"name": "api", "files": ["src/api/routes.py"]}]'
    """
    global_context: GlobalContext = ctx.obj

    with handle_merges_exception():
        if sum([plan is not None, plan_file is not None, auto]) > 1:
            raise ValidationError("Use only one of --plan, --plan-file and --auto.")

        state = MergesState.load(global_context.repo_root)

        if plan is not None:
            chunk_plan = parse_plan(plan)
        elif plan_file is not None:
            try:
                chunk_plan = parse_plan(plan_file.read_text(encoding="utf-8"))
            except OSError as e:
                raise ValidationError(f"Could not read plan file {plan_file}", str(e)) from e
        elif auto:
            chunk_plan = auto_plan(global_context, state)
            if not chunk_plan:
                logger.info("All changed files are already assigned to chunks.")
                return
        else:
            _show_changed_files(global_context, state)
            return

        new_state = run_split(global_context, chunk_plan, state)

    created = len(new_state.chunks) - len(state.chunks)
    logger.success(f"[green]✓[/green] Created {created} chunk(s)")
