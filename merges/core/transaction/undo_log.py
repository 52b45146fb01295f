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

from collections.abc import Callable

from loguru import logger

from merges.core.exceptions import MergesError, RollbackError


class UndoLog:
    """
    Ordered list of compensating actions for a multi-step repository change.

    Each action is pushed right after the step it compensates succeeds.
    ``rollback`` runs them newest first and keeps going when one fails; the
    failures are logged and returned, never raised.
    """

    def __init__(self) -> None:
        self._actions: list[tuple[str, Callable[[], None]]] = []

    def __len__(self) -> int:
        return len(self._actions)

    def push(self, description: str, action: Callable[[], None]) -> None:
        self._actions.append((description, action))

    def clear(self) -> None:
        self._actions.clear()

    def rollback(self) -> list[RollbackError]:
        errors: list[RollbackError] = []
        while self._actions:
            description, action = self._actions.pop()
            logger.debug(f"Rollback: {description}")
            try:
                action()
            except (MergesError, OSError) as e:
                details = e.details if isinstance(e, MergesError) else None
                error = RollbackError(f"Rollback step failed: {description}: {e}", details)
                logger.warning(error.message)
                errors.append(error)
        return errors
