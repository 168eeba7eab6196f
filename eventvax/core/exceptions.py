# eventvax/core/exceptions.py
"""
Exception hierarchy for the chain sync.

Infra-level errors (NetworkError) abort a whole reconciliation pass.
Record-level errors (DecodeError, PersistenceError) are caught at the record
boundary by the reconciler. MetadataUnavailable is soft and never escalated.
"""

from typing import Optional


class ChainSyncError(Exception):
    """Base exception for all chain sync errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "CHAIN_SYNC_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class NetworkError(ChainSyncError):
    """Every candidate endpoint (RPC, explorer, gateway) failed."""

    def __init__(self, message: str, errors: Optional[list] = None):
        self.errors = errors or []
        super().__init__(
            message,
            error_code="NETWORK_ERROR",
            details={"errors": [str(e) for e in self.errors]},
        )


class DecodeError(ChainSyncError):
    """A single raw log entry could not be decoded."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        self.transaction_hash = transaction_hash
        super().__init__(
            message,
            error_code="DECODE_ERROR",
            details={"transaction_hash": transaction_hash},
        )


class PersistenceError(ChainSyncError):
    """Writing a mirrored row to the local store failed."""

    def __init__(self, message: str, blockchain_event_id: Optional[int] = None):
        self.blockchain_event_id = blockchain_event_id
        super().__init__(
            message,
            error_code="PERSISTENCE_ERROR",
            details={"blockchain_event_id": blockchain_event_id},
        )


class MetadataUnavailable(ChainSyncError):
    """No off-chain metadata could be obtained for an entity."""

    def __init__(self, entity_type: int, entity_id: int, reason: str = ""):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"No metadata for entity {entity_type}:{entity_id}"
            + (f" ({reason})" if reason else ""),
            error_code="METADATA_UNAVAILABLE",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class SyncInProgressError(ChainSyncError):
    """A reconciliation pass is already running."""

    def __init__(self):
        super().__init__(
            "A blockchain sync pass is already in progress",
            error_code="SYNC_IN_PROGRESS",
        )
