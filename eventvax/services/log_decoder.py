# eventvax/services/log_decoder.py
"""
Decodes raw EventRegistered log entries into OnChainEventRecord.

Both chain readers hand over entries in the same normalized shape:
hex-string `topics`, hex-string `data`, `transactionHash` and an optional
`blockNumber` (int or hex string).
"""
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from eth_abi import decode as abi_decode
from web3 import Web3

from eventvax.constants.chain import EVENT_REGISTERED_DATA_TYPES, EVENT_REGISTERED_SIGNATURE
from eventvax.core.exceptions import DecodeError
from eventvax.schemas.chain import OnChainEventRecord

EVENT_REGISTERED_TOPIC = Web3.to_hex(Web3.keccak(text=EVENT_REGISTERED_SIGNATURE))

# blockchain_event_id is a signed 64-bit INTEGER column
MAX_EVENT_ID = 2**63 - 1


def _hex_to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise TypeError(f"expected hex string, got {type(value).__name__}")
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def _parse_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.startswith("0x"):
        return int(value, 16)
    return int(value)


def _to_datetime(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def decode_event_registered(entry: Mapping[str, Any]) -> OnChainEventRecord:
    """
    Decodes one EventRegistered log entry.

    Raises DecodeError for anything that is not a well-formed EventRegistered
    log; the caller decides whether to continue with the next entry.
    """
    tx_hash = entry.get("transactionHash") if isinstance(entry, Mapping) else None
    try:
        if not tx_hash:
            raise ValueError("missing transactionHash")
        topics = [_hex_to_bytes(t) for t in entry["topics"]]
        if len(topics) < 3:
            raise ValueError(f"expected 3 topics, got {len(topics)}")
        if Web3.to_hex(topics[0]) != EVENT_REGISTERED_TOPIC:
            raise ValueError(f"unexpected topic0 {Web3.to_hex(topics[0])}")

        event_id = int.from_bytes(topics[1], "big")
        if event_id > MAX_EVENT_ID:
            raise ValueError(f"eventId {event_id} exceeds the storable range")
        organizer = Web3.to_checksum_address(topics[2][-20:])
        ticket_contract, start_time, end_time = abi_decode(
            EVENT_REGISTERED_DATA_TYPES, _hex_to_bytes(entry["data"])
        )

        return OnChainEventRecord(
            event_id=event_id,
            organizer=organizer,
            start_time=_to_datetime(start_time),
            end_time=_to_datetime(end_time),
            transaction_hash=tx_hash,
            ticket_contract=Web3.to_checksum_address(ticket_contract),
            block_number=_parse_int(entry.get("blockNumber")),
        )
    except Exception as e:
        raise DecodeError(
            f"Malformed EventRegistered log in tx {tx_hash}: {e}",
            transaction_hash=tx_hash,
        ) from e
