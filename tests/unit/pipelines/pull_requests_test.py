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

from unittest.mock import Mock

from merges.core.state.state import Chunk, MergesState, Strategy
from merges.pipelines.pull_requests import (
    PullRequestRef,
    open_pull_requests,
    pr_body,
    pr_targets,
    record_pull_requests,
)


def make_state(strategy=Strategy.STACKED, source="ABC-12-big", prefix=None) -> MergesState:
    return MergesState(
        base_branch="main",
        source_branch=source,
        strategy=strategy,
        commit_prefix=prefix,
        chunks=[
            Chunk(name="models", branch=f"{source}-chunk-1-models", files=["m.py"]),
            Chunk(name="api", branch=f"{source}-chunk-2-api", files=["a.py", "b.py"]),
            Chunk(name="ui", branch=f"{source}-chunk-3-ui", files=["u.ts"]),
        ],
    )


def test_stacked_targets_chain_onto_previous_chunk():
    targets = pr_targets(make_state())

    assert [(t.head, t.base) for t in targets] == [
        ("ABC-12-big-chunk-1-models", "main"),
        ("ABC-12-big-chunk-2-api", "ABC-12-big-chunk-1-models"),
        ("ABC-12-big-chunk-3-ui", "ABC-12-big-chunk-2-api"),
    ]


def test_independent_targets_all_use_base():
    targets = pr_targets(make_state(Strategy.INDEPENDENT))
    assert {t.base for t in targets} == {"main"}


def test_titles_carry_ticket_and_position():
    titles = [t.title for t in pr_targets(make_state())]
    assert titles == ["ABC-12 models (1/3)", "ABC-12 api (2/3)", "ABC-12 ui (3/3)"]


def test_titles_use_explicit_prefix():
    targets = pr_targets(make_state(prefix="[web]"))
    assert targets[0].title == "[web] models (1/3)"


def test_body_lists_files():
    state = make_state()
    body = pr_body(state, state.chunks[1])

    assert "`ABC-12-big`" in body
    assert "- `a.py`\n- `b.py`" in body


def test_record_pull_requests_returns_new_state():
    state = make_state()

    new_state = record_pull_requests(state, {"api": PullRequestRef(42, "https://example.com/pr/42")})

    assert new_state.find_chunk("api").pr_number == 42
    assert new_state.find_chunk("api").pr_url == "https://example.com/pr/42"
    assert state.find_chunk("api").pr_number is None


def test_open_pull_requests_calls_service_per_chunk():
    service = Mock()
    service.ensure_pull_request.side_effect = [
        PullRequestRef(n, f"https://example.com/pr/{n}") for n in (1, 2, 3)
    ]

    new_state = open_pull_requests(make_state(), service)

    assert [c.pr_number for c in new_state.chunks] == [1, 2, 3]
    head, base, title, body = service.ensure_pull_request.call_args_list[1].args
    assert (head, base) == ("ABC-12-big-chunk-2-api", "ABC-12-big-chunk-1-models")
    assert title == "ABC-12 api (2/3)"
    assert "a.py" in body
