# eventvax/api/v1/endpoints/events.py
import math

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from eventvax.crud import crud_event
from eventvax.db.session import get_db
from eventvax.schemas.event import Event as EventSchema, PaginatedEvent

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=PaginatedEvent)
def list_events(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
):
    """Retrieves a paginated list of mirrored events, newest first."""
    skip = (page - 1) * limit
    events = crud_event.event.get_multi_with_ticket_counts(db, skip=skip, limit=limit)
    total_events = crud_event.event.count(db)

    return {
        "data": events,
        "pagination": {
            "totalItems": total_events,
            "totalPages": math.ceil(total_events / limit),
            "currentPage": page,
        },
    }


@router.get("/chain/{blockchain_event_id}", response_model=EventSchema)
def get_event_by_chain_id(blockchain_event_id: int, db: Session = Depends(get_db)):
    """Looks up the mirrored row for an on-chain event id."""
    event = crud_event.event.get_by_blockchain_event_id(
        db, blockchain_event_id=blockchain_event_id
    )
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Event not found"
        )
    return crud_event.event.to_dict_with_ticket_count(db, db_obj=event)


@router.get("/{event_id}", response_model=EventSchema)
def get_event(event_id: int, db: Session = Depends(get_db)):
    event = crud_event.event.get(db, id=event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Event not found"
        )
    return crud_event.event.to_dict_with_ticket_count(db, db_obj=event)
