# eventvax/constants/chain.py
"""
ABI fragments for the EventVax contracts the sync reads from.
"""

from enum import IntEnum


class MetadataType(IntEnum):
    """Entity discriminant used as the first key of the metadata registry."""

    EVENT = 0
    TICKET = 1
    POAP = 2
    BADGE = 3


EVENT_REGISTERED_SIGNATURE = "EventRegistered(uint256,address,address,uint256,uint256)"

# Non-indexed EventRegistered arguments, in the order they are packed in `data`
EVENT_REGISTERED_DATA_TYPES = ["address", "uint256", "uint256"]

METADATA_REGISTRY_ABI = [
    {
        "inputs": [
            {"name": "entityType", "type": "uint8"},
            {"name": "entityId", "type": "uint256"},
        ],
        "name": "getMetadata",
        "outputs": [
            {
                "components": [
                    {"name": "ipfsHash", "type": "string"},
                    {"name": "contentHash", "type": "bytes32"},
                    {"name": "timestamp", "type": "uint256"},
                    {"name": "updatedBy", "type": "address"},
                    {"name": "frozen", "type": "bool"},
                ],
                "name": "",
                "type": "tuple",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    }
]

ZERO_HASH = "0x" + "00" * 32
