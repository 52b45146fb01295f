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

from dataclasses import dataclass, field


@dataclass
class SyncReport:
    synced: list[str] = field(default_factory=list)
    fetched_from: str = ""


@dataclass
class DoctorReport:
    issues: list[str] = field(default_factory=list)
    repaired: list[str] = field(default_factory=list)

    def all_ok(self) -> bool:
        return not self.issues


@dataclass(frozen=True)
class StatusRow:
    name: str
    branch: str
    files: int
    behind: int | None
    label: str
    pr_number: int | None = None


@dataclass
class CleanReport:
    removed: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    def all_ok(self) -> bool:
        return not self.failures
