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

from merges.context import AddContext, GlobalContext
from merges.core.exceptions import handle_merges_exception
from merges.core.state.state import MergesState
from merges.pipelines.chunk_mutator import ChunkMutator


def run_add(global_context: GlobalContext, add_context: AddContext) -> MergesState:
    root = global_context.repo_root
    state = MergesState.load(root)

    new_state = ChunkMutator(global_context, state, root).add_files(add_context)
    if new_state is not state:
        new_state.save(root)
    return new_state


def main(
    ctx: typer.Context,
    chunk: str = typer.Argument(..., help="Name of the chunk to add files to."),
    files: list[str] = typer.Argument(..., help="Files to add (paths relative to the repository root)."),
) -> None:
    """Add files from the source branch to an existing chunk."""
    global_context: GlobalContext = ctx.obj

    with handle_merges_exception():
        run_add(global_context, AddContext(chunk=chunk, files=files))

    logger.debug("Add command completed")
