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

import pytest

from merges.core.utils.naming import (
    chunk_branch_name,
    chunk_commit_message,
    format_message,
    slugify,
    sync_status,
    ticket_prefix,
)

# -----------------------------------------------------------------------------
# Slug Tests
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "name,expected",
    [
        ("models", "models"),
        ("Data Models", "data-models"),
        ("  api / v2  ", "api-v2"),
        ("C++ bindings!", "c-bindings"),
        ("???", "chunk"),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


def test_chunk_branch_name():
    assert chunk_branch_name("feat/big", 3, "Data Models") == "feat/big-chunk-3-data-models"


# -----------------------------------------------------------------------------
# Ticket Prefix Tests
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "branch,expected",
    [
        ("ABC-123-big-feature", "ABC-123"),
        ("PROJ2-7", "PROJ2-7"),
        ("abc-123-lowercase", None),
        ("feature/ABC-123", None),
        ("ABC-feature", None),
        ("main", None),
    ],
)
def test_ticket_prefix(branch, expected):
    assert ticket_prefix(branch) == expected


def test_format_message_adds_detected_prefix():
    assert format_message("ABC-123-big", "feat: thing") == "ABC-123 feat: thing"


def test_format_message_without_ticket():
    assert format_message("feat/big", "feat: thing") == "feat: thing"


def test_format_message_explicit_prefix_wins():
    assert format_message("ABC-123-big", "feat: thing", "[core]") == "[core] feat: thing"


def test_format_message_is_not_applied_twice():
    once = format_message("ABC-123-big", "feat: thing")
    assert format_message("ABC-123-big", once) == once


# -----------------------------------------------------------------------------
# Message Tests
# -----------------------------------------------------------------------------


def test_chunk_commit_message():
    message = chunk_commit_message("Data Models", 2, ["a.py", "b.py"])

    subject, body = message.split("\n\n", 1)
    assert subject == "feat(data-models): chunk 2 - Data Models"
    assert body == "Files:\na.py\nb.py"


def test_sync_status():
    assert sync_status(0) == "✓ current"
    assert sync_status(4) == "↓ 4 behind"
