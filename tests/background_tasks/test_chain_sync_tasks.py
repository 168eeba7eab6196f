# tests/background_tasks/test_chain_sync_tasks.py
import asyncio
import threading

import pytest

from eventvax.background_tasks.chain_sync_tasks import ChainSyncTask
from eventvax.core.config import Settings
from eventvax.core.exceptions import SyncInProgressError
from eventvax.schemas.sync import SyncStatus
from eventvax.services.chain_sync import ChainSyncRunner
from tests.utils.chain import StaticLogReader, make_event_registered_log


class GatedLogReader(StaticLogReader):
    """Blocks inside fetch_logs until the test opens the gate."""

    def __init__(self, entries):
        super().__init__(entries)
        self.started = threading.Event()
        self.gate = threading.Event()

    def fetch_logs(self, from_block=0, to_block="latest"):
        self.started.set()
        self.gate.wait(timeout=5)
        yield from super().fetch_logs(from_block, to_block)


def make_task(session_factory, reader):
    runner = ChainSyncRunner(
        session_factory,
        settings=Settings(CHAIN_READER="explorer"),
        reader_factory=lambda settings, http_client: reader,
        resolver_factory=lambda settings, http_client: None,
    )
    return ChainSyncTask(runner)


@pytest.mark.asyncio
async def test_start_runs_pass_in_background(session_factory):
    task = make_task(
        session_factory, StaticLogReader([make_event_registered_log(i) for i in (1, 2)])
    )

    task.start()
    report = await task.wait()

    assert report.status == SyncStatus.completed
    assert report.inserted == 2
    assert not task.running
    assert task.state().last_report.inserted == 2


@pytest.mark.asyncio
async def test_second_start_while_running_is_rejected(session_factory):
    reader = GatedLogReader([make_event_registered_log(1)])
    task = make_task(session_factory, reader)

    task.start()
    await asyncio.to_thread(reader.started.wait, 5)

    assert task.running
    with pytest.raises(SyncInProgressError):
        task.start()

    reader.gate.set()
    report = await task.wait()
    assert report.inserted == 1

    # A finished pass can be followed by a new one
    task.start()
    report = await task.wait()
    assert report.skipped_existing == 1


@pytest.mark.asyncio
async def test_cancel_stops_before_next_record(session_factory):
    reader = GatedLogReader([make_event_registered_log(i) for i in (1, 2, 3)])
    task = make_task(session_factory, reader)

    task.start()
    await asyncio.to_thread(reader.started.wait, 5)
    task.cancel()
    reader.gate.set()
    report = await task.wait()

    assert report.status == SyncStatus.cancelled
    assert report.inserted == 0


@pytest.mark.asyncio
async def test_shutdown_waits_for_cancelled_pass(session_factory):
    reader = GatedLogReader([make_event_registered_log(1)])
    task = make_task(session_factory, reader)

    task.start()
    await asyncio.to_thread(reader.started.wait, 5)
    asyncio.get_running_loop().call_later(0.05, reader.gate.set)
    await task.shutdown(timeout=5)

    assert not task.running
    assert task.runner.last_report.status == SyncStatus.cancelled


@pytest.mark.asyncio
async def test_wait_without_pass_returns_last_report(session_factory):
    task = make_task(session_factory, StaticLogReader([]))

    assert await task.wait() is None
    assert task.state().running is False
