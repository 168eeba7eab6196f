from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class OnChainEventRecord(BaseModel):
    """A decoded EventRegistered log. Immutable once observed."""

    model_config = ConfigDict(frozen=True)

    event_id: int = Field(..., ge=0, json_schema_extra={"example": 7})
    organizer: str = Field(
        ..., json_schema_extra={"example": "0xAbC0000000000000000000000000000000000001"}
    )
    name: Optional[str] = None
    start_time: datetime
    end_time: datetime
    transaction_hash: str
    ticket_contract: Optional[str] = None
    block_number: Optional[int] = None


class MetadataPointer(BaseModel):
    """Registry entry pointing at an off-chain JSON document."""

    model_config = ConfigDict(frozen=True)

    ipfs_hash: str
    content_hash: str
    frozen: bool = False
    timestamp: int = 0
    updated_by: Optional[str] = None


class ResolvedMetadata(BaseModel):
    """An off-chain document together with the registry pointer it came from."""

    pointer: MetadataPointer
    document: Dict[str, Any]
    gateway: Optional[str] = None

    def _text(self, key: str) -> Optional[str]:
        value = self.document.get(key)
        if not isinstance(value, str):
            return None
        return value.strip() or None

    @property
    def name(self) -> Optional[str]:
        return self._text("name")

    @property
    def location(self) -> Optional[str]:
        return self._text("location")

    @property
    def image(self) -> Optional[str]:
        return self._text("image")

    @property
    def description(self) -> Optional[str]:
        return self._text("description")
