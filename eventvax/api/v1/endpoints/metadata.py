# eventvax/api/v1/endpoints/metadata.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from eventvax.api import deps
from eventvax.core.exceptions import NetworkError
from eventvax.schemas.sync import IpfsDocumentResponse
from eventvax.services.metadata_resolver import IpfsGatewayClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/metadata", tags=["Metadata"])


@router.get("/{ipfs_hash}", response_model=IpfsDocumentResponse)
def read_ipfs_metadata(
    ipfs_hash: str,
    gateway: IpfsGatewayClient = Depends(deps.get_gateway_client),
):
    """Fetches a metadata document from IPFS, trying each gateway in order."""
    try:
        _, document = gateway.fetch_json(ipfs_hash)
    except NetworkError as e:
        logger.warning(f"IPFS fetch failed for {ipfs_hash}: {e}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Failed to fetch from all IPFS gateways",
        )
    return {"success": True, "data": document}
