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

from merges.context import GlobalContext, MoveContext
from merges.core.exceptions import handle_merges_exception
from merges.core.state.state import MergesState
from merges.pipelines.chunk_mutator import ChunkMutator


def run_move(global_context: GlobalContext, move_context: MoveContext) -> MergesState:
    root = global_context.repo_root
    state = MergesState.load(root)

    new_state = ChunkMutator(global_context, state, root).move_file(move_context)
    if new_state is not state:
        new_state.save(root)
    return new_state


def main(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="File to move (path relative to the repository root)."),
    from_chunk: str = typer.Option(..., "--from", help="Chunk that currently owns the file."),
    to_chunk: str = typer.Option(..., "--to", help="Chunk that should own the file."),
) -> None:
    """Move a file from one chunk to another."""
    global_context: GlobalContext = ctx.obj

    with handle_merges_exception():
        run_move(
            global_context,
            MoveContext(file=file, from_chunk=from_chunk, to_chunk=to_chunk),
        )

    logger.debug("Move command completed")
