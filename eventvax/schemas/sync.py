from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SyncStatus(str, Enum):
    running = "running"
    completed = "completed"
    failed = "failed"
    skipped = "skipped"
    cancelled = "cancelled"


class SyncReport(BaseModel):
    """Outcome of one reconciliation pass."""

    status: SyncStatus = SyncStatus.running
    strategy: Optional[str] = None
    seen: int = 0
    inserted: int = 0
    skipped_existing: int = 0
    failed: int = 0
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    def finish(self, status: SyncStatus, error: Optional[str] = None) -> "SyncReport":
        self.status = status
        self.error = error
        self.finished_at = datetime.now(timezone.utc)
        return self


class SyncState(BaseModel):
    running: bool
    last_report: Optional[SyncReport] = None
    scheduler: Dict[str, Any] = Field(default_factory=dict)


class SyncTriggerResponse(BaseModel):
    status: str
    message: Optional[str] = None


class IpfsDocumentResponse(BaseModel):
    success: bool = True
    data: Any
