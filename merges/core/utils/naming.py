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

import re

_TICKET_RE = re.compile(r"^([A-Z][A-Z0-9]*-\d+)")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Turn a human chunk name into something safe to embed in a branch name."""
    slug = _SLUG_STRIP_RE.sub("-", name.lower()).strip("-")
    return slug or "chunk"


def chunk_branch_name(source_branch: str, ordinal: int, chunk_name: str) -> str:
    return f"{source_branch}-chunk-{ordinal}-{slugify(chunk_name)}"


def ticket_prefix(branch: str) -> str | None:
    """
    Extract a ticket code such as ``ABC-123`` from the start of a branch name.

    Returns None when the branch does not begin with an uppercase ticket code.
    """
    match = _TICKET_RE.match(branch)
    return match.group(1) if match else None


def format_message(
    source_branch: str, message: str, explicit_prefix: str | None = None
) -> str:
    """
    Prefix a commit message (or PR title) with the ticket code for the source branch.

    An explicit prefix always wins over the one detected from the branch name.
    """
    prefix = explicit_prefix or ticket_prefix(source_branch)
    if not prefix or message.startswith(prefix):
        return message
    return f"{prefix} {message}"


def chunk_commit_message(chunk_name: str, ordinal: int, files: list[str]) -> str:
    file_list = "\n".join(files)
    return f"feat({slugify(chunk_name)}): chunk {ordinal} - {chunk_name}\n\nFiles:\n{file_list}"


def sync_status(behind: int) -> str:
    if behind == 0:
        return "✓ current"
    return f"↓ {behind} behind"
