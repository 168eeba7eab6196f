# eventvax/services/chain_sync.py
"""
One full reconciliation pass: chain reader -> reconciler -> local store.

ChainSyncRunner owns a single-slot lock. The existence-check-then-insert
pattern is not atomic against an interleaved pass, so at most one pass runs
at a time per process; a second caller gets a `skipped` report.
"""
import logging
import threading
from typing import Callable, Optional

import httpx
from sqlalchemy.orm import Session

from eventvax.core.config import Settings, settings as default_settings
from eventvax.core.exceptions import NetworkError
from eventvax.crud import crud_event
from eventvax.schemas.sync import SyncReport, SyncStatus
from eventvax.services.chain_reader import ChainLogReader, build_chain_reader
from eventvax.services.metadata_resolver import MetadataResolver, build_metadata_resolver
from eventvax.services.reconciler import EventReconciler

logger = logging.getLogger(__name__)

ReaderFactory = Callable[[Settings, httpx.Client], ChainLogReader]
ResolverFactory = Callable[[Settings, httpx.Client], Optional[MetadataResolver]]


class ChainSyncRunner:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        settings: Settings = default_settings,
        reader_factory: ReaderFactory = build_chain_reader,
        resolver_factory: ResolverFactory = build_metadata_resolver,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.reader_factory = reader_factory
        self.resolver_factory = resolver_factory
        self.last_report: Optional[SyncReport] = None
        self._lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def run_once(self, cancel_event: Optional[threading.Event] = None) -> SyncReport:
        """
        Runs one pass unless another one is in progress.

        Never raises: infra failures end the pass with a `failed` report.
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("Blockchain sync already in progress, skipping this run")
            return SyncReport(strategy=self.settings.CHAIN_READER).finish(
                SyncStatus.skipped, "A blockchain sync pass is already in progress"
            )
        try:
            report = self._run(cancel_event)
            self.last_report = report
            return report
        finally:
            self._lock.release()

    def _start_block(self, db: Session) -> int:
        """
        FROM_BLOCK, or the highest mirrored block when resuming is enabled.

        The last block is scanned again because other registrations mined in
        it may not have been stored yet; the existence check skips the rest.
        """
        start = self.settings.FROM_BLOCK
        if not self.settings.RESUME_FROM_LAST_BLOCK:
            return start
        last_block = crud_event.event.get_last_synced_block(db)
        if last_block is not None and last_block > start:
            logger.info(f"Resuming blockchain sync from block {last_block}")
            return last_block
        return start

    def _run(self, cancel_event: Optional[threading.Event]) -> SyncReport:
        report = SyncReport(strategy=self.settings.CHAIN_READER)
        logger.info(f"Starting blockchain sync ({self.settings.CHAIN_READER})...")

        db = None
        try:
            with httpx.Client(timeout=self.settings.HTTP_TIMEOUT_SECONDS) as http_client:
                reader = self.reader_factory(self.settings, http_client)
                resolver = self.resolver_factory(self.settings, http_client)
                db = self.session_factory()
                reconciler = EventReconciler(
                    db, resolver=resolver, placeholder_venue=self.settings.PLACEHOLDER_VENUE
                )
                entries = reader.fetch_logs(
                    from_block=self._start_block(db), to_block=self.settings.TO_BLOCK
                )
                reconciler.reconcile(entries, report=report, cancel_event=cancel_event)
        except NetworkError as e:
            logger.error(f"Blockchain sync failed: {e}")
            return report.finish(SyncStatus.failed, str(e))
        except Exception as e:
            logger.exception(f"Blockchain sync failed unexpectedly: {e}")
            return report.finish(SyncStatus.failed, str(e))
        finally:
            if db is not None:
                db.close()

        logger.info(
            f"Blockchain sync {report.status.value}: {report.inserted} new events synced, "
            f"{report.skipped_existing} already present, {report.failed} failed"
        )
        return report
