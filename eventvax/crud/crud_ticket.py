# eventvax/crud/crud_ticket.py
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from eventvax.crud.base import CRUDBase
from eventvax.models.ticket import Ticket
from eventvax.schemas.ticket import TicketCreate


class CRUDTicket(CRUDBase[Ticket, TicketCreate]):

    def count_by_event_ids(self, db: Session, *, event_ids: List[int]) -> Dict[int, int]:
        """Returns {event_id: total tickets} for the given events."""
        if not event_ids:
            return {}
        rows = (
            db.query(self.model.event_id, func.coalesce(func.sum(self.model.quantity), 0))
            .filter(self.model.event_id.in_(event_ids))
            .group_by(self.model.event_id)
            .all()
        )
        return {event_id: int(total) for event_id, total in rows}


ticket = CRUDTicket(Ticket)
