# tests/services/test_explorer_reader.py
import httpx
import pytest

from eventvax.core.config import Settings
from eventvax.core.exceptions import NetworkError
from eventvax.services.chain_reader import (
    ExplorerLogReader,
    RpcLogReader,
    build_chain_reader,
)
from eventvax.services.log_decoder import EVENT_REGISTERED_TOPIC
from eventvax.utils.retry import network_retrying
from tests.utils.chain import make_event_registered_log

API_URL = "https://explorer.test/api"
ADDRESS = "0x1651f730a846eD23411180eC71C9eFbFCD05A871"


def make_reader(handler, attempts=3):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ExplorerLogReader(
        client,
        api_url=API_URL,
        api_key="test-key",
        address=ADDRESS,
        timeout=1.0,
        retrying=network_retrying(attempts=attempts, max_wait=0),
    )


class TestExplorerLogReader:
    def test_returns_logs_and_sends_log_query(self):
        logs = [make_event_registered_log(1), make_event_registered_log(2)]
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"status": "1", "message": "OK", "result": logs})

        reader = make_reader(handler)
        result = list(reader.fetch_logs(from_block=0, to_block="latest"))

        assert result == logs
        params = seen[0].url.params
        assert params["module"] == "logs"
        assert params["action"] == "getLogs"
        assert params["address"] == ADDRESS
        assert params["topic0"] == EVENT_REGISTERED_TOPIC
        assert params["fromBlock"] == "0"
        assert params["toBlock"] == "latest"
        assert params["apikey"] == "test-key"

    def test_is_lazy_until_iterated(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"status": "1", "result": []})

        reader = make_reader(handler)
        logs = reader.fetch_logs()
        assert calls == []

        assert list(logs) == []
        assert len(calls) == 1

    def test_no_records_is_an_empty_sequence(self):
        def handler(request):
            return httpx.Response(
                200, json={"status": "0", "message": "No records found", "result": []}
            )

        assert list(make_reader(handler).fetch_logs()) == []

    def test_api_error_raises_network_error_after_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(
                200, json={"status": "0", "message": "NOTOK", "result": "Invalid API Key"}
            )

        with pytest.raises(NetworkError):
            list(make_reader(handler, attempts=3).fetch_logs())
        assert len(calls) == 3

    def test_any_2xx_response_is_accepted(self):
        logs = [make_event_registered_log(4)]

        def handler(request):
            return httpx.Response(203, json={"status": "1", "message": "OK", "result": logs})

        assert list(make_reader(handler).fetch_logs()) == logs

    def test_http_error_raises_network_error(self):
        def handler(request):
            return httpx.Response(502, text="bad gateway")

        with pytest.raises(NetworkError):
            list(make_reader(handler, attempts=1).fetch_logs())

    def test_transient_transport_error_is_retried(self):
        calls = []
        logs = [make_event_registered_log(3)]

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"status": "1", "result": logs})

        assert list(make_reader(handler).fetch_logs()) == logs
        assert len(calls) == 2


class TestBuildChainReader:
    def test_explorer_is_the_default_strategy(self):
        with httpx.Client() as client:
            reader = build_chain_reader(Settings(), client)
        assert isinstance(reader, ExplorerLogReader)
        assert reader.strategy == "explorer"

    def test_rpc_strategy(self):
        settings = Settings(CHAIN_READER="rpc", RPC_URLS=["http://node.test"], LOG_BATCH_SIZE=10)
        with httpx.Client() as client:
            reader = build_chain_reader(settings, client)
        assert isinstance(reader, RpcLogReader)
        assert reader.rpc_urls == ["http://node.test"]
        assert reader.batch_size == 10
