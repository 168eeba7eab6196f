# eventvax/services/web3_provider.py
import logging
from typing import Callable, List, Tuple

from web3 import Web3

from eventvax.utils.fallback import first_successful

logger = logging.getLogger(__name__)

Web3Factory = Callable[[str, float], Web3]


def make_web3(rpc_url: str, timeout: float) -> Web3:
    """HTTP provider whose every request is bounded by `timeout` seconds."""
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))


def connect_first_live(
    rpc_urls: List[str],
    *,
    timeout: float,
    web3_factory: Web3Factory = make_web3,
) -> Tuple[str, Web3]:
    """
    Returns the first RPC endpoint that answers a block-height probe.

    Raises NetworkError when none of the endpoints respond.
    """

    def probe(rpc_url: str, probe_timeout: float) -> Web3:
        w3 = web3_factory(rpc_url, probe_timeout)
        block = w3.eth.block_number
        logger.info(f"Connected to RPC {rpc_url} at block {block}")
        return w3

    endpoint, w3 = first_successful(rpc_urls, probe, timeout=timeout, label="RPC endpoint")
    return endpoint, w3
