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
Directory-based grouping of changed files into candidate chunks.

Files are grouped by their top-level directory. When every change lives
under a single top-level directory (for example ``src/``), grouping moves
one level down so the result still splits into meaningful chunks. A file
directly inside a directory (``src/main.rs``) always groups under that
directory, and a file at the repository root falls into the ``root`` group.

Each group holds a file at most once: duplicate input paths collapse into a
single entry, and files within a group are sorted.
"""

from collections import defaultdict

from merges.core.data.chunk_plan import ChunkPlan

ROOT_GROUP = "root"


def _segment(path: str, depth: int) -> str:
    parts = [p for p in path.split("/") if p]
    if len(parts) < 2:
        return ROOT_GROUP
    # the last part is the file name, not a directory
    if len(parts) == 2:
        return parts[0]
    return parts[depth]


def choose_depth(files: list[str]) -> int:
    top_level = {_segment(f, 0) for f in files}
    non_root = top_level - {ROOT_GROUP}
    return 1 if len(non_root) == 1 else 0


def auto_group(files: list[str]) -> list[ChunkPlan]:
    if not files:
        return []

    depth = choose_depth(files)
    groups: dict[str, set[str]] = defaultdict(set)
    for f in files:
        groups[_segment(f, depth)].add(f)

    return [
        ChunkPlan(name=key, files=sorted(groups[key])) for key in sorted(groups)
    ]
