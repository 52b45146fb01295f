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

from merges.constants import DEFAULT_BASE_BRANCH, STATE_FILE
from merges.context import GlobalContext, InitContext
from merges.core.exceptions import MergesError, ValidationError, handle_merges_exception
from merges.core.state.state import MergesState, Strategy


def run_init(global_context: GlobalContext, init_context: InitContext) -> MergesState:
    commands = global_context.git_commands
    root = global_context.repo_root

    source_branch = commands.current_branch(root)
    if source_branch == "HEAD":
        raise ValidationError("HEAD is detached. Check out the branch you want to split first.")
    if source_branch == init_context.base_branch:
        raise ValidationError(
            f"The current branch is the base branch '{init_context.base_branch}'. "
            "Check out the feature branch you want to split."
        )
    if not commands.branch_exists(root, init_context.base_branch):
        logger.warning(
            f"Base branch '{init_context.base_branch}' does not exist locally"
        )

    owner_repo = commands.remote_owner_repo(root, global_context.config.remote)
    if owner_repo is None:
        logger.warning(
            f"Could not determine owner/repo from remote '{global_context.config.remote}'"
        )
        owner_repo = ("", "")

    state = MergesState(
        base_branch=init_context.base_branch,
        source_branch=source_branch,
        repo_owner=owner_repo[0],
        repo_name=owner_repo[1],
        strategy=Strategy(init_context.strategy),
        use_worktrees=init_context.use_worktrees,
        commit_prefix=init_context.commit_prefix or None,
    )
    state.save(root)
    commands.ensure_excluded(root, STATE_FILE)
    commands.enable_rerere(root)
    return state


def main(
    ctx: typer.Context,
    base: str = typer.Option(
        DEFAULT_BASE_BRANCH,
        "--base",
        "-b",
        help="Base branch the chunks will eventually merge into.",
    ),
    strategy: Strategy = typer.Option(
        Strategy.STACKED,
        "--strategy",
        help="How chunk branches relate to each other when rebased and reviewed.",
    ),
    worktrees: bool = typer.Option(
        False,
        "--worktrees",
        help="Give each chunk its own worktree so chunks can be synced in parallel.",
    ),
    commit_prefix: str | None = typer.Option(
        None,
        "--commit-prefix",
        help="Prefix for commit messages instead of the ticket detected from the branch name.",
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing state file."
    ),
) -> None:
    """Initialise merges for the current branch.

    Examples:
        # Split the current branch, targeting main
        merges init

        # Target develop and use one worktree per chunk
        merges init --base develop --worktrees
    """
    global_context: GlobalContext = ctx.obj

    with handle_merges_exception():
        root = global_context.repo_root
        if MergesState.exists(root) and not force:
            if global_context.config.auto_accept:
                logger.debug(f"Overwriting {STATE_FILE} (auto accept)")
            elif not typer.confirm(f"{STATE_FILE} already exists. Overwrite?", default=False):
                raise MergesError("Aborted.")

        state = run_init(
            global_context,
            InitContext(
                base_branch=base,
                strategy=strategy.value,
                use_worktrees=worktrees,
                commit_prefix=commit_prefix,
                force=force,
            ),
        )

    logger.success(
        f"[green]✓[/green] Initialised merges for {state.repo_owner or '?'}/{state.repo_name or '?'} "
        f"(source: {state.source_branch}, base: {state.base_branch})"
    )
    logger.info("  rerere enabled: conflict resolutions will be replayed automatically.")
    logger.info("  Next: run `merges split` to assign files to chunks.")
