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

"""
Logging configuration for the merges CLI application.

Console output goes through a rich Console so messages may carry rich
markup; everything down to DEBUG is also written to a rotating log file
in the user's log directory.
"""

import os
from datetime import datetime
from pathlib import Path

from loguru import logger
from rich.console import Console

from merges.constants import APP_NAME, ENV_APP_PREFIX, LOG_DIR

console = Console()
error_console = Console(stderr=True)


class StructuredLogger:
    """Structured logging helper for consistent log formatting."""

    def __init__(self, command_name: str, console_level: str):
        self.command_name = command_name
        self.console_level = console_level
        self.logfile: Path | None = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        # Clear existing sinks to avoid duplicates
        logger.remove()

        log_level = os.getenv(f"{ENV_APP_PREFIX}LOG_LEVEL", "DEBUG").upper()
        console_level = os.getenv(
            f"{ENV_APP_PREFIX}CONSOLE_LOG_LEVEL", self.console_level
        ).upper()

        def console_sink(message):
            record = message.record
            text = record["message"].rstrip("\n")
            if record["level"].no >= logger.level("ERROR").no:
                error_console.print(text)
            else:
                console.print(text)

        logger.add(console_sink, level=console_level, format="{message}", catch=True)

        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug(f"Could not create log directory {LOG_DIR}: {e}")
            return

        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        logfile = LOG_DIR / f"{APP_NAME}_{timestamp}.log"

        logger.add(
            logfile,
            level=log_level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name}:{function}:{line} | "
            "{message}",
            rotation="10 MB",
            retention="14 days",
            catch=True,
            backtrace=True,
            diagnose=False,
        )

        logger.bind(
            command=self.command_name, logfile=str(logfile), log_level=log_level
        ).debug("Logger initialized")

        self.logfile = logfile

    def get_logfile(self) -> Path | None:
        return self.logfile


def setup_logger(
    command_name: str, debug: bool = False, silent: bool = False
) -> Path | None:
    """
    Set up logging for a command.

    Args:
        command_name: Name of the command being executed
        debug: Show debug output on the console
        silent: Only show errors on the console

    Returns:
        Path to the log file, or None if file logging is unavailable
    """
    if silent:
        console_level = "ERROR"
    elif debug:
        console_level = "DEBUG"
    else:
        console_level = "INFO"

    return StructuredLogger(command_name, console_level).get_logfile()


def get_log_directory() -> Path:
    """Get the directory where log files are stored."""
    return LOG_DIR
