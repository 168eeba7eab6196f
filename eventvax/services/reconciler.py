# eventvax/services/reconciler.py
"""
Mirrors decoded on-chain events into the local `events` table.

Each log entry is reconciled on its own: decode, existence check, optional
metadata enrichment, single-row insert. A bad entry is logged and counted,
and the loop moves on to the next one.
"""
import logging
import threading
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventvax.constants.chain import MetadataType
from eventvax.core.config import settings
from eventvax.core.exceptions import DecodeError, PersistenceError
from eventvax.crud import crud_event
from eventvax.schemas.chain import OnChainEventRecord, ResolvedMetadata
from eventvax.schemas.event import EventCreate
from eventvax.schemas.sync import SyncReport, SyncStatus
from eventvax.services.log_decoder import decode_event_registered
from eventvax.services.metadata_resolver import MetadataResolver

logger = logging.getLogger(__name__)


def default_event_name(event_id: int) -> str:
    return f"Event #{event_id}"


class EventReconciler:
    def __init__(
        self,
        db: Session,
        *,
        resolver: Optional[MetadataResolver] = None,
        placeholder_venue: Optional[str] = None,
    ):
        self.db = db
        self.resolver = resolver
        self.placeholder_venue = placeholder_venue or settings.PLACEHOLDER_VENUE

    def build_row(
        self, record: OnChainEventRecord, metadata: Optional[ResolvedMetadata] = None
    ) -> EventCreate:
        """
        Name: on-chain name, then metadata name, then "Event #<id>".
        Venue: metadata location, then the placeholder venue.
        """
        name = record.name or (metadata.name if metadata else None)
        return EventCreate(
            event_name=name or default_event_name(record.event_id),
            event_date=record.start_time,
            event_end_date=record.end_time,
            venue=(metadata.location if metadata else None) or self.placeholder_venue,
            description=metadata.description if metadata else None,
            flyer_image=metadata.image if metadata else None,
            ipfs_metadata_hash=metadata.pointer.ipfs_hash if metadata else None,
            content_hash=metadata.pointer.content_hash if metadata else None,
            creator_address=record.organizer,
            ticket_contract_address=record.ticket_contract,
            blockchain_tx_hash=record.transaction_hash,
            blockchain_event_id=record.event_id,
            block_number=record.block_number,
        )

    def reconcile_record(self, record: OnChainEventRecord) -> bool:
        """
        Inserts the record unless it is already mirrored.

        Returns True when a row was inserted. Raises PersistenceError when the
        existence check or the insert fails.
        """
        try:
            if crud_event.event.exists_for_blockchain_event(
                self.db, blockchain_event_id=record.event_id
            ):
                return False
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(
                f"Existence check failed for event {record.event_id}: {e}",
                blockchain_event_id=record.event_id,
            ) from e

        metadata = None
        if self.resolver is not None:
            metadata = self.resolver.resolve(MetadataType.EVENT, record.event_id)

        crud_event.event.create_from_chain(self.db, obj_in=self.build_row(record, metadata))
        return True

    def reconcile(
        self,
        entries: Iterable[Mapping[str, Any]],
        *,
        report: Optional[SyncReport] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SyncReport:
        """
        Reconciles entries in the order the chain reader yields them.

        Errors raised by the iterable itself (the chain reader) are not
        caught here; they abort the pass.
        """
        report = report or SyncReport()
        for entry in entries:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(
                    f"Blockchain sync cancelled after {report.seen} logs"
                )
                return report.finish(SyncStatus.cancelled)

            report.seen += 1
            try:
                record = decode_event_registered(entry)
            except DecodeError as e:
                report.failed += 1
                logger.error(f"Skipping undecodable log: {e}")
                continue

            try:
                inserted = self.reconcile_record(record)
            except PersistenceError as e:
                report.failed += 1
                logger.error(f"Failed to sync event {record.event_id}: {e}")
                continue
            except Exception as e:
                self.db.rollback()
                report.failed += 1
                logger.exception(f"Unexpected error syncing event {record.event_id}: {e}")
                continue

            if inserted:
                report.inserted += 1
                logger.info(
                    f"Synced blockchain event {record.event_id} (tx {record.transaction_hash})"
                )
            else:
                report.skipped_existing += 1

        return report.finish(SyncStatus.completed)
