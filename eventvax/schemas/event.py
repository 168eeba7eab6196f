from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class EventCreate(BaseModel):
    """A row to mirror from the chain."""

    event_name: str = Field(..., json_schema_extra={"example": "Event #7"})
    event_date: datetime
    event_end_date: Optional[datetime] = None
    venue: str = Field(..., json_schema_extra={"example": "Blockchain Event"})
    description: Optional[str] = None
    flyer_image: Optional[str] = None
    ipfs_metadata_hash: Optional[str] = None
    content_hash: Optional[str] = None
    creator_address: Optional[str] = None
    ticket_contract_address: Optional[str] = None
    blockchain_tx_hash: Optional[str] = None
    blockchain_event_id: Optional[int] = None
    block_number: Optional[int] = None


class Event(BaseModel):
    id: int
    event_name: str
    event_date: datetime
    event_end_date: Optional[datetime] = None
    venue: str
    description: Optional[str] = None
    flyer_image: Optional[str] = None
    ipfs_metadata_hash: Optional[str] = None
    content_hash: Optional[str] = None
    creator_address: Optional[str] = None
    ticket_contract_address: Optional[str] = None
    blockchain_tx_hash: Optional[str] = None
    blockchain_event_id: Optional[int] = None
    block_number: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ticketsCount: int = 0

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    totalItems: int
    totalPages: int
    currentPage: int


class PaginatedEvent(BaseModel):
    data: List[Event]
    pagination: Pagination
