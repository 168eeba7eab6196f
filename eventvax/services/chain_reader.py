# eventvax/services/chain_reader.py
"""
Readers that pull EventRegistered log entries from the chain.

Two interchangeable strategies read the same contract and topic:

* ExplorerLogReader: one call to an Etherscan-compatible `getLogs` API.
* RpcLogReader: `eth_getLogs` against the first live JSON-RPC endpoint,
  in fixed-size block windows.

A deployment uses exactly one of them (settings.CHAIN_READER). They are not
chained as fallbacks of each other.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional, Union

import httpx
from tenacity import Retrying
from web3 import Web3

from eventvax.core.config import Settings
from eventvax.core.exceptions import NetworkError
from eventvax.services.log_decoder import EVENT_REGISTERED_TOPIC
from eventvax.services.web3_provider import Web3Factory, connect_first_live, make_web3
from eventvax.utils.retry import network_retrying

logger = logging.getLogger(__name__)

BlockRef = Union[int, str]
LogEntry = Dict[str, Any]


class ChainLogReader:
    """Produces raw log entries, lazily, for a block range."""

    strategy = "base"

    def fetch_logs(
        self, from_block: BlockRef = 0, to_block: BlockRef = "latest"
    ) -> Iterator[LogEntry]:
        raise NotImplementedError


class ExplorerLogReader(ChainLogReader):
    strategy = "explorer"

    NO_RECORDS_MESSAGE = "no records found"

    def __init__(
        self,
        client: httpx.Client,
        *,
        api_url: str,
        api_key: str,
        address: str,
        topic0: str = EVENT_REGISTERED_TOPIC,
        timeout: float = 15.0,
        retrying: Optional[Retrying] = None,
    ):
        self.client = client
        self.api_url = api_url
        self.api_key = api_key
        self.address = address
        self.topic0 = topic0
        self.timeout = timeout
        self.retrying = retrying or network_retrying(attempts=3, max_wait=8)

    def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self.client.get(self.api_url, params=params, timeout=self.timeout)
        if not response.is_success:
            raise NetworkError(
                f"Explorer API returned HTTP {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Explorer API returned invalid JSON: {e}") from e

    def _query(self, params: Dict[str, Any]) -> List[LogEntry]:
        payload = self._request(params)
        if not isinstance(payload, dict):
            raise NetworkError("Explorer API returned an unexpected payload")

        status = str(payload.get("status"))
        message = str(payload.get("message", ""))
        result = payload.get("result")

        if status == "1" and isinstance(result, list):
            return result
        if status == "0" and message.lower().startswith(self.NO_RECORDS_MESSAGE):
            return []
        raise NetworkError(f"Explorer API error: {message} ({result})")

    def fetch_logs(
        self, from_block: BlockRef = 0, to_block: BlockRef = "latest"
    ) -> Iterator[LogEntry]:
        params = {
            "module": "logs",
            "action": "getLogs",
            "address": self.address,
            "topic0": self.topic0,
            "fromBlock": from_block,
            "toBlock": to_block,
            "apikey": self.api_key,
        }
        logs = self.retrying(self._query, params)
        logger.info(f"Explorer returned {len(logs)} EventRegistered logs")
        yield from logs


def _as_hex(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return Web3.to_hex(value)


def normalize_rpc_log(log: Any) -> LogEntry:
    """Converts a web3 log (HexBytes fields) into the explorer-style shape."""
    return {
        "address": log.get("address"),
        "topics": [_as_hex(t) for t in log.get("topics", [])],
        "data": _as_hex(log.get("data")),
        "transactionHash": _as_hex(log.get("transactionHash")),
        "blockNumber": log.get("blockNumber"),
        "logIndex": log.get("logIndex"),
    }


class RpcLogReader(ChainLogReader):
    strategy = "rpc"

    def __init__(
        self,
        rpc_urls: List[str],
        *,
        address: str,
        topic0: str = EVENT_REGISTERED_TOPIC,
        timeout: float = 10.0,
        batch_size: int = 2048,
        chain_id: Optional[int] = None,
        retrying: Optional[Retrying] = None,
        web3_factory: Web3Factory = make_web3,
    ):
        self.rpc_urls = rpc_urls
        self.address = address
        self.topic0 = topic0
        self.timeout = timeout
        self.batch_size = max(1, batch_size)
        self.retrying = retrying or network_retrying(attempts=3, max_wait=8)
        self.web3_factory = web3_factory
        self.chain_id = chain_id
        self._w3: Optional[Web3] = None

    def connect(self) -> Web3:
        if self._w3 is None:
            _, self._w3 = self.retrying(
                connect_first_live,
                self.rpc_urls,
                timeout=self.timeout,
                web3_factory=self.web3_factory,
            )
            self._check_chain_id(self._w3)
        return self._w3

    def _check_chain_id(self, w3: Web3) -> None:
        if self.chain_id is None:
            return
        try:
            actual = w3.eth.chain_id
        except Exception as e:
            logger.warning(f"Could not read chain id from RPC: {e}")
            return
        if actual != self.chain_id:
            logger.warning(f"RPC reports chain id {actual}, expected {self.chain_id}")

    def _resolve_block(self, w3: Web3, block: BlockRef) -> int:
        if isinstance(block, str) and block == "latest":
            return w3.eth.block_number
        if isinstance(block, str):
            return int(block, 16) if block.startswith("0x") else int(block)
        return int(block)

    def _get_logs_window(self, w3: Web3, start: int, end: int) -> list:
        try:
            return w3.eth.get_logs(
                {
                    "address": Web3.to_checksum_address(self.address),
                    "topics": [self.topic0],
                    "fromBlock": start,
                    "toBlock": end,
                }
            )
        except Exception as e:
            raise NetworkError(f"eth_getLogs failed for blocks {start}-{end}: {e}", errors=[e]) from e

    def fetch_logs(
        self, from_block: BlockRef = 0, to_block: BlockRef = "latest"
    ) -> Iterator[LogEntry]:
        w3 = self.connect()
        try:
            start = self._resolve_block(w3, from_block)
            end = self._resolve_block(w3, to_block)
        except Exception as e:
            raise NetworkError(f"Could not resolve block range: {e}", errors=[e]) from e

        while start <= end:
            window_end = min(start + self.batch_size - 1, end)
            logs = self.retrying(self._get_logs_window, w3, start, window_end)
            if logs:
                logger.info(f"RPC returned {len(logs)} logs for blocks {start}-{window_end}")
            for log in logs:
                yield normalize_rpc_log(log)
            start = window_end + 1


def build_chain_reader(settings: Settings, http_client: httpx.Client) -> ChainLogReader:
    """Builds the configured authoritative reader."""
    retrying = network_retrying(
        attempts=settings.RETRY_ATTEMPTS, max_wait=settings.RETRY_MAX_WAIT_SECONDS
    )
    if settings.CHAIN_READER == "rpc":
        return RpcLogReader(
            settings.RPC_URLS,
            address=settings.EVENT_MANAGER_ADDRESS,
            timeout=settings.RPC_TIMEOUT_SECONDS,
            batch_size=settings.LOG_BATCH_SIZE,
            chain_id=settings.CHAIN_ID,
            retrying=retrying,
        )
    return ExplorerLogReader(
        http_client,
        api_url=settings.EXPLORER_API_URL,
        api_key=settings.EXPLORER_API_KEY,
        address=settings.EVENT_MANAGER_ADDRESS,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        retrying=retrying,
    )
