# eventvax/crud/crud_event.py
import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventvax.core.exceptions import PersistenceError
from eventvax.crud.base import CRUDBase
from eventvax.crud.crud_ticket import ticket as crud_ticket
from eventvax.models.event import Event
from eventvax.schemas.event import EventCreate

logger = logging.getLogger(__name__)


class CRUDEvent(CRUDBase[Event, EventCreate]):

    def get_by_blockchain_event_id(
        self, db: Session, *, blockchain_event_id: int
    ) -> Optional[Event]:
        return (
            db.query(self.model)
            .filter(self.model.blockchain_event_id == blockchain_event_id)
            .first()
        )

    def exists_for_blockchain_event(
        self, db: Session, *, blockchain_event_id: int
    ) -> bool:
        """Existence check run before every mirrored insert."""
        return (
            db.query(self.model.id)
            .filter(self.model.blockchain_event_id == blockchain_event_id)
            .first()
            is not None
        )

    def get_last_synced_block(self, db: Session) -> Optional[int]:
        """Highest block among mirrored events, or None when nothing is mirrored."""
        return db.query(func.max(self.model.block_number)).scalar()

    def create_from_chain(self, db: Session, *, obj_in: EventCreate) -> Event:
        """
        Inserts one mirrored row in its own transaction.

        Any database failure is rolled back and raised as PersistenceError so
        the caller can move on to the next record.
        """
        db_obj = self.model(**obj_in.model_dump())
        try:
            db.add(db_obj)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(
                f"Failed to insert event {obj_in.blockchain_event_id}: {e}",
                blockchain_event_id=obj_in.blockchain_event_id,
            ) from e
        db.refresh(db_obj)
        return db_obj

    def get_multi_with_ticket_counts(
        self, db: Session, *, skip: int = 0, limit: int = 100
    ) -> List[Dict]:
        """
        Gets a page of events, newest first, each with its ticket count.
        """
        events = self.get_multi(db, skip=skip, limit=limit)
        if not events:
            return []

        counts_map = crud_ticket.count_by_event_ids(
            db, event_ids=[event.id for event in events]
        )

        event_dicts = []
        for event in events:
            event_dict = {
                c.name: getattr(event, c.name) for c in event.__table__.columns
            }
            event_dict["ticketsCount"] = counts_map.get(event.id, 0)
            event_dicts.append(event_dict)
        return event_dicts

    def to_dict_with_ticket_count(self, db: Session, *, db_obj: Event) -> Dict:
        event_dict = {c.name: getattr(db_obj, c.name) for c in db_obj.__table__.columns}
        event_dict["ticketsCount"] = crud_ticket.count_by_event_ids(
            db, event_ids=[db_obj.id]
        ).get(db_obj.id, 0)
        return event_dict


event = CRUDEvent(Event)
