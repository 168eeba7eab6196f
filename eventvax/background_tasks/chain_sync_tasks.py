# eventvax/background_tasks/chain_sync_tasks.py
"""
Background execution of the blockchain sync.

The pass is synchronous (SQLAlchemy session, httpx.Client, web3 HTTP
provider), so it runs on a worker thread via asyncio.to_thread. The asyncio
task is the completion/error channel the host observes; cancellation is
cooperative and takes effect between two records.
"""

import asyncio
import logging
import threading
from typing import Optional

from eventvax.core.exceptions import SyncInProgressError
from eventvax.schemas.sync import SyncReport, SyncState
from eventvax.services.chain_sync import ChainSyncRunner

logger = logging.getLogger(__name__)


class ChainSyncTask:
    def __init__(self, runner: ChainSyncRunner):
        self.runner = runner
        self._task: Optional[asyncio.Task] = None
        self._cancel_event = threading.Event()

    @property
    def running(self) -> bool:
        return (
            self._task is not None and not self._task.done()
        ) or self.runner.in_progress

    def start(self) -> asyncio.Task:
        """
        Schedules one pass and returns immediately.

        Must be called from a running event loop. Raises SyncInProgressError
        when a pass (startup, manual or scheduled) is still running.
        """
        if self.running:
            raise SyncInProgressError()

        self._cancel_event = threading.Event()
        self._task = asyncio.create_task(
            asyncio.to_thread(self.runner.run_once, self._cancel_event),
            name="blockchain-sync",
        )
        self._task.add_done_callback(self._on_done)
        logger.info("Blockchain sync scheduled in background")
        return self._task

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning("Blockchain sync task was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Blockchain sync task crashed", exc_info=exc)

    def cancel(self) -> None:
        """Asks the running pass to stop before its next record."""
        self._cancel_event.set()

    async def wait(self) -> Optional[SyncReport]:
        """Waits for the current pass and returns its report."""
        if self._task is None:
            return self.runner.last_report
        return await self._task

    async def shutdown(self, timeout: float = 10.0) -> None:
        if self._task is None or self._task.done():
            return
        self.cancel()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Blockchain sync did not stop within {timeout}s")

    def state(self) -> SyncState:
        return SyncState(running=self.running, last_report=self.runner.last_report)
