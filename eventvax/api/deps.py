# eventvax/api/deps.py
from fastapi import Request

from eventvax.background_tasks.chain_sync_tasks import ChainSyncTask
from eventvax.core.config import settings
from eventvax.services.metadata_resolver import IpfsGatewayClient


def get_sync_task(request: Request) -> ChainSyncTask:
    """The background sync task created by the application lifespan."""
    return request.app.state.sync_task


def get_gateway_client(request: Request) -> IpfsGatewayClient:
    return IpfsGatewayClient(
        request.app.state.http_client,
        settings.IPFS_GATEWAYS,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )
