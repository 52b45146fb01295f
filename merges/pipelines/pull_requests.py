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
Contract between chunk state and a code-hosting pull request service.

merges does not talk to any hosting API itself. A service implementing
``PullRequestService`` is handed the head/base pair for each chunk and
returns the number and URL of the pull request it created or updated;
those are stored verbatim on the chunk.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from merges.core.state.state import Chunk, MergesState, Strategy
from merges.core.utils.naming import format_message


@dataclass(frozen=True)
class PullRequestRef:
    number: int
    url: str


@dataclass(frozen=True)
class PullRequestTarget:
    chunk: str
    head: str
    base: str
    title: str


class PullRequestService(Protocol):
    def ensure_pull_request(
        self, head: str, base: str, title: str, body: str
    ) -> PullRequestRef: ...


def pr_title(state: MergesState, chunk: Chunk, ordinal: int) -> str:
    return format_message(
        state.source_branch,
        f"{chunk.name} ({ordinal}/{len(state.chunks)})",
        state.commit_prefix,
    )


def pr_body(state: MergesState, chunk: Chunk) -> str:
    files = "\n".join(f"- `{f}`" for f in chunk.files)
    return (
        f"Part of splitting `{state.source_branch}` into reviewable chunks.\n\n"
        f"**Files:**\n{files}\n"
    )


def pr_targets(state: MergesState) -> list[PullRequestTarget]:
    """
    Work out where each chunk's pull request should point.

    Stacked: the first chunk targets the base branch and every later chunk
    targets the previous chunk's branch. Independent: all target the base.
    """
    targets = []
    previous: str | None = None
    for i, chunk in enumerate(state.chunks, start=1):
        if state.strategy == Strategy.STACKED and previous is not None:
            base = previous
        else:
            base = state.base_branch
        targets.append(
            PullRequestTarget(
                chunk=chunk.name,
                head=chunk.branch,
                base=base,
                title=pr_title(state, chunk, i),
            )
        )
        previous = chunk.branch
    return targets


def record_pull_requests(
    state: MergesState, refs: Mapping[str, PullRequestRef]
) -> MergesState:
    new_state = state.model_copy(deep=True)
    for name, ref in refs.items():
        chunk = new_state.find_chunk(name)
        chunk.pr_number = ref.number
        chunk.pr_url = ref.url
    return new_state


def open_pull_requests(
    state: MergesState, service: PullRequestService
) -> MergesState:
    """Ask ``service`` for a pull request per chunk and record the results."""
    chunks = {c.name: c for c in state.chunks}
    refs = {}
    for target in pr_targets(state):
        refs[target.chunk] = service.ensure_pull_request(
            target.head, target.base, target.title, pr_body(state, chunks[target.chunk])
        )
    return record_pull_requests(state, refs)
