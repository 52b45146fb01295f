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

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from loguru import logger

from merges.context import GlobalContext
from merges.core.data.reports import SyncReport
from merges.core.exceptions import MergesError, SyncError
from merges.core.logging.utils import time_block
from merges.core.state.state import Chunk, MergesState, Strategy


class SyncPipeline:
    """
    Rebases every chunk branch onto the latest ``<remote>/<base_branch>``.

    The remote is fetched once up front. With worktrees, each chunk is rebased
    in its own directory on a thread pool and every failure is collected
    before the call fails. Without worktrees, chunks are rebased one after
    another in the shared tree, stopping at the first failure because a
    stopped rebase leaves the tree unusable for the next checkout.

    Sync never changes the persisted state, only branch tips.
    """

    def __init__(self, global_context: GlobalContext, state: MergesState, root: Path):
        self.global_context = global_context
        self.state = state
        self.root = root
        self.commands = global_context.git_commands
        self.remote = global_context.config.remote
        self.workspace = global_context.working_context(state, root)

    @property
    def cascade_refs(self) -> bool:
        return self.state.strategy == Strategy.STACKED

    def run(self) -> SyncReport:
        report = SyncReport(fetched_from=self.remote)
        if not self.state.chunks:
            logger.info("No chunks to sync")
            return report

        with time_block("Fetch"):
            self.commands.fetch(self.root, self.remote)

        if self.state.use_worktrees:
            failures = self._sync_parallel(report)
        else:
            failures = self._sync_sequential(report)

        if failures:
            raise SyncError(failures)
        return report

    def _rebase_chunk(self, chunk: Chunk) -> None:
        onto = f"{self.remote}/{self.state.base_branch}"
        if self.state.use_worktrees:
            with self.workspace.enter(self.commands, chunk.branch) as work_dir:
                self.commands.rebase(work_dir, onto, update_refs=self.cascade_refs)
            return

        self.commands.checkout(self.root, chunk.branch)
        # a stopped rebase is left in place for manual resolution
        self.commands.rebase(self.root, onto, update_refs=self.cascade_refs)
        self.commands.checkout(self.root, self.state.source_branch)

    def _sync_sequential(self, report: SyncReport) -> dict[str, str]:
        for chunk in self.state.chunks:
            logger.info(f"Syncing {chunk.branch}...")
            try:
                self._rebase_chunk(chunk)
            except MergesError as e:
                logger.error(f"[red]✗[/red] {chunk.name}: {e.message}")
                return {chunk.name: e.message}
            report.synced.append(chunk.name)
            logger.info(f"[green]✓[/green] {chunk.name}")
        return {}

    def _sync_parallel(self, report: SyncReport) -> dict[str, str]:
        failures: dict[str, str] = {}
        workers = min(self.global_context.config.max_parallel_syncs, len(self.state.chunks))

        with time_block("Parallel rebase"):
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._rebase_chunk, chunk): chunk
                    for chunk in self.state.chunks
                }
                for future in as_completed(futures):
                    chunk = futures[future]
                    try:
                        future.result()
                    except MergesError as e:
                        logger.error(f"[red]✗[/red] {chunk.name}: {e.message}")
                        failures[chunk.name] = e.message
                    else:
                        logger.info(f"[green]✓[/green] {chunk.name}")

        # report in state order regardless of completion order
        report.synced.extend(c.name for c in self.state.chunks if c.name not in failures)
        return {c.name: failures[c.name] for c in self.state.chunks if c.name in failures}
