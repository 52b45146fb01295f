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

import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from loguru import logger

from merges.commands import add, clean, doctor, init, move, split, status, sync
from merges.constants import APP_NAME
from merges.context import GlobalConfig, GlobalContext
from merges.core.config.config_loader import ConfigLoader
from merges.core.exceptions import handle_merges_exception
from merges.core.logging.logging import setup_logger
from merges.runtimeutil import (
    ensure_utf8_output,
    get_log_dir_callback,
    setup_signal_handlers,
    version_callback,
)

# main cli app
app = typer.Typer(
    help=f"{APP_NAME}: split one large branch into small, reviewable chunk branches",
    pretty_exceptions_show_locals=False,
    pretty_exceptions_enable=False,
    add_completion=False,
)

# Main cli commands
app.command(name="init")(init.main)
app.command(name="split")(split.main)
app.command(name="add")(add.main)
app.command(name="move")(move.main)
app.command(name="sync")(sync.main)
app.command(name="status")(status.main)
app.command(name="doctor")(doctor.main)
app.command(name="clean")(clean.main)


def load_global_config(custom_config_path: str | None, **input_args):
    # input args are the "runtime overrides" for configs
    config_args = {}

    for key, item in input_args.items():
        if item is not None:
            config_args[key] = item

    return ConfigLoader.get_full_config(
        GlobalConfig,
        config_args,
        custom_config_path=Path(custom_config_path)
        if custom_config_path is not None
        else None,
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_path: bool = typer.Option(
        False,
        "--log-dir",
        "-LD",
        callback=get_log_dir_callback,
        is_eager=True,
        help=f"Show log path (where logs for {APP_NAME} live) and exit",
    ),
    repo_path: str = typer.Option(
        ".",
        "--repo",
        help="Path to the git repository to operate on.",
    ),
    custom_config: str | None = typer.Option(
        None,
        "--custom-config",
        help="Path to a custom config file",
    ),
    remote: str | None = typer.Option(
        None,
        "--remote",
        help="Remote to fetch from and rebase onto.",
    ),
    max_parallel_syncs: int | None = typer.Option(
        None,
        "--max-parallel-syncs",
        help="Upper bound on concurrent rebases in worktree mode.",
    ),
    verbose: bool | None = typer.Option(
        None,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
    silent: bool | None = typer.Option(
        None,
        "--silent",
        "-s",
        help="Only output errors and prompts.",
    ),
    auto_accept: bool | None = typer.Option(
        None, "--yes", "-y", help="Automatically accept all confirmation prompts"
    ),
) -> None:
    """
    Global setup callback. Initialize global context/config used by commands
    """
    # skip --help in subcommands
    if any(arg in ctx.help_option_names for arg in sys.argv[1:]):
        return

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    # initial setup of logger, will be updated once config is loaded
    setup_logger(ctx.invoked_subcommand, debug=verbose or False, silent=silent or False)

    with handle_merges_exception():
        config, used_config_sources, _ = load_global_config(
            custom_config,
            verbose=verbose,
            silent=silent,
            auto_accept=auto_accept,
            remote=remote,
            max_parallel_syncs=max_parallel_syncs,
        )

        setup_logger(ctx.invoked_subcommand, debug=config.verbose, silent=config.silent)
        logger.debug(f"Used {used_config_sources} to build global context.")

        global_context = GlobalContext.from_global_config(config, Path(repo_path))
        # fail immediately if we arent in a git repository
        global_context.git_commands.repo_root(global_context.repo_path)

    ctx.obj = global_context


def run_app():
    """Run the application with global exception handling."""
    # force stdout to be utf8
    ensure_utf8_output()
    # Set up signal handlers for graceful shutdown
    setup_signal_handlers()
    # load any .env files (config values possibly set through env)
    load_dotenv()
    # launch cli
    app(prog_name=APP_NAME)


if __name__ == "__main__":
    run_app()
