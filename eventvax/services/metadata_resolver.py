# eventvax/services/metadata_resolver.py
"""
Resolves off-chain descriptive metadata for on-chain entities.

The metadata registry contract maps (entity type, entity id) to an IPFS hash
and a content digest. The JSON document itself is fetched from the first IPFS
gateway that answers. Missing metadata is a soft condition: `resolve` returns
None and callers fall back to default display values.
"""
import hashlib
import json
import logging
from typing import Any, List, Optional

import httpx
from web3 import Web3

from eventvax.constants.chain import METADATA_REGISTRY_ABI, ZERO_HASH, MetadataType
from eventvax.core.config import Settings
from eventvax.core.exceptions import MetadataUnavailable, NetworkError
from eventvax.schemas.chain import MetadataPointer, ResolvedMetadata
from eventvax.services.web3_provider import connect_first_live
from eventvax.utils.fallback import FallbackResult, expand_templates, first_successful

logger = logging.getLogger(__name__)


def normalize_cid(ipfs_hash: str) -> str:
    """Strips `ipfs://` and `/ipfs/` prefixes from a content identifier."""
    cid = ipfs_hash.strip()
    for prefix in ("ipfs://", "/ipfs/"):
        if cid.startswith(prefix):
            cid = cid[len(prefix):]
    return cid


def content_hash_of(document: Any) -> str:
    """
    SHA-256 of the compact JSON encoding of a document, 0x-prefixed.

    Matches the digest the uploader stores in the registry.
    """
    content = document if isinstance(document, str) else json.dumps(
        document, separators=(",", ":"), ensure_ascii=False
    )
    return "0x" + hashlib.sha256(content.encode("utf-8")).hexdigest()


class MetadataRegistryClient:
    """Read-only wrapper around the registry's `getMetadata` view."""

    def __init__(self, w3: Web3, address: str):
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(address), abi=METADATA_REGISTRY_ABI
        )

    def get_pointer(
        self, entity_type: MetadataType, entity_id: int
    ) -> Optional[MetadataPointer]:
        try:
            ipfs_hash, content_hash, timestamp, updated_by, frozen = (
                self.contract.functions.getMetadata(int(entity_type), entity_id).call()
            )
            if not ipfs_hash:
                return None
            return MetadataPointer(
                ipfs_hash=ipfs_hash,
                content_hash=Web3.to_hex(content_hash),
                frozen=bool(frozen),
                timestamp=int(timestamp),
                updated_by=updated_by,
            )
        except Exception as e:
            raise MetadataUnavailable(int(entity_type), entity_id, str(e)) from e


class IpfsGatewayClient:
    """Fetches JSON documents from an ordered list of IPFS gateways."""

    def __init__(self, client: httpx.Client, gateways: List[str], timeout: float = 5.0):
        self.client = client
        self.gateways = gateways
        self.timeout = timeout

    def _get_json(self, url: str, timeout: float) -> Any:
        response = self.client.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json()

    def fetch_json(self, ipfs_hash: str) -> FallbackResult:
        """
        Returns (gateway url, parsed document) from the first gateway that
        answers with a 2xx JSON body. Raises NetworkError if none does.
        """
        urls = expand_templates(self.gateways, cid=normalize_cid(ipfs_hash))
        return first_successful(urls, self._get_json, timeout=self.timeout, label="IPFS gateway")


class MetadataResolver:
    def __init__(
        self,
        gateway: IpfsGatewayClient,
        registry: Optional[MetadataRegistryClient] = None,
        verify_content_hash: bool = True,
    ):
        self.gateway = gateway
        self.registry = registry
        self.verify_content_hash = verify_content_hash

    def resolve(
        self, entity_type: MetadataType, entity_id: int
    ) -> Optional[ResolvedMetadata]:
        if self.registry is None:
            return None

        try:
            pointer = self.registry.get_pointer(entity_type, entity_id)
        except MetadataUnavailable as e:
            logger.info(f"No metadata for {MetadataType(entity_type).name.lower()} {entity_id}: {e}")
            return None
        if pointer is None:
            logger.info(f"No metadata pointer for {MetadataType(entity_type).name.lower()} {entity_id}")
            return None

        try:
            gateway, document = self.gateway.fetch_json(pointer.ipfs_hash)
        except NetworkError as e:
            logger.warning(f"Metadata {pointer.ipfs_hash} unreachable for {entity_id}: {e}")
            return None

        if not isinstance(document, dict):
            logger.warning(f"Metadata {pointer.ipfs_hash} is not a JSON object, ignoring")
            return None

        if self.verify_content_hash and pointer.content_hash not in (ZERO_HASH, "0x"):
            actual = content_hash_of(document)
            if actual.lower() != pointer.content_hash.lower():
                logger.warning(
                    f"Content hash mismatch for {pointer.ipfs_hash}: "
                    f"registry={pointer.content_hash} fetched={actual}"
                )

        return ResolvedMetadata(pointer=pointer, document=document, gateway=gateway)


def build_metadata_resolver(settings: Settings, http_client: httpx.Client) -> MetadataResolver:
    """
    Builds a resolver bound to the metadata registry.

    The registry needs an RPC connection; without one the resolver still
    works and simply reports no metadata for every entity.
    """
    gateway = IpfsGatewayClient(
        http_client, settings.IPFS_GATEWAYS, timeout=settings.GATEWAY_TIMEOUT_SECONDS
    )
    registry = None
    try:
        _, w3 = connect_first_live(settings.RPC_URLS, timeout=settings.RPC_TIMEOUT_SECONDS)
        registry = MetadataRegistryClient(w3, settings.METADATA_REGISTRY_ADDRESS)
    except NetworkError as e:
        logger.warning(f"Metadata registry unavailable, using default event details: {e}")
    return MetadataResolver(
        gateway, registry=registry, verify_content_hash=settings.VERIFY_CONTENT_HASH
    )
