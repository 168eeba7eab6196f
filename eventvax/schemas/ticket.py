from typing import Optional

from pydantic import BaseModel


class TicketCreate(BaseModel):
    event_id: int
    wallet_address: str
    tier_id: int
    quantity: int
    qr_code: Optional[str] = None
    transaction_hash: Optional[str] = None
    verified: bool = False
