# tests/services/test_rpc_reader.py
from unittest.mock import MagicMock, PropertyMock

import pytest
from hexbytes import HexBytes
from web3 import Web3

from eventvax.core.exceptions import NetworkError
from eventvax.services.chain_reader import RpcLogReader
from eventvax.services.log_decoder import EVENT_REGISTERED_TOPIC, decode_event_registered
from eventvax.services.web3_provider import connect_first_live
from eventvax.utils.retry import network_retrying
from tests.utils.chain import make_event_registered_log

ADDRESS = "0x1651f730a846eD23411180eC71C9eFbFCD05A871"


def live_node(block_number=250):
    w3 = MagicMock()
    w3.eth.block_number = block_number
    w3.eth.get_logs.return_value = []
    return w3


def dead_node():
    w3 = MagicMock()
    type(w3.eth).block_number = PropertyMock(side_effect=ConnectionError("node down"))
    return w3


def factory_for(nodes):
    created = []

    def factory(url, timeout):
        created.append((url, timeout))
        return nodes[url]

    factory.created = created
    return factory


def make_reader(nodes, batch_size=100, attempts=1):
    factory = factory_for(nodes)
    reader = RpcLogReader(
        list(nodes),
        address=ADDRESS,
        timeout=2.0,
        batch_size=batch_size,
        retrying=network_retrying(attempts=attempts, max_wait=0),
        web3_factory=factory,
    )
    return reader, factory


def as_rpc_log(entry):
    return {
        "address": ADDRESS,
        "topics": [HexBytes(t) for t in entry["topics"]],
        "data": HexBytes(entry["data"]),
        "transactionHash": HexBytes(entry["transactionHash"]),
        "blockNumber": 120,
        "logIndex": 0,
    }


class TestConnectFirstLive:
    def test_skips_dead_endpoints(self):
        good = live_node()
        factory = factory_for({"http://a": dead_node(), "http://b": good, "http://c": live_node()})

        endpoint, w3 = connect_first_live(
            ["http://a", "http://b", "http://c"], timeout=3.0, web3_factory=factory
        )

        assert endpoint == "http://b"
        assert w3 is good
        # The third endpoint is never contacted
        assert factory.created == [("http://a", 3.0), ("http://b", 3.0)]

    def test_all_endpoints_down(self):
        factory = factory_for({"http://a": dead_node(), "http://b": dead_node()})

        with pytest.raises(NetworkError) as exc_info:
            connect_first_live(["http://a", "http://b"], timeout=1.0, web3_factory=factory)
        assert len(exc_info.value.errors) == 2


class TestRpcLogReader:
    def test_requests_logs_in_block_windows(self):
        node = live_node(block_number=250)
        reader, _ = make_reader({"http://a": node}, batch_size=100)

        list(reader.fetch_logs(from_block=0, to_block="latest"))

        windows = [
            (c.args[0]["fromBlock"], c.args[0]["toBlock"])
            for c in node.eth.get_logs.call_args_list
        ]
        assert windows == [(0, 99), (100, 199), (200, 250)]
        first_filter = node.eth.get_logs.call_args_list[0].args[0]
        assert first_filter["topics"] == [EVENT_REGISTERED_TOPIC]
        assert first_filter["address"] == Web3.to_checksum_address(ADDRESS)

    def test_yields_normalized_logs(self):
        node = live_node(block_number=150)
        entry = make_event_registered_log(5)
        node.eth.get_logs.side_effect = [[as_rpc_log(entry)], []]
        reader, _ = make_reader({"http://a": node}, batch_size=100)

        logs = list(reader.fetch_logs(from_block=0, to_block="latest"))

        assert len(logs) == 1
        assert logs[0]["topics"] == entry["topics"]
        assert logs[0]["transactionHash"] == entry["transactionHash"]
        assert decode_event_registered(logs[0]).event_id == 5

    def test_falls_back_to_next_endpoint(self):
        good = live_node(block_number=10)
        reader, _ = make_reader({"http://a": dead_node(), "http://b": good})

        list(reader.fetch_logs(from_block=0, to_block=10))

        assert reader.connect() is good
        good.eth.get_logs.assert_called_once()

    def test_all_endpoints_down_raises_network_error(self):
        reader, factory = make_reader(
            {"http://a": dead_node(), "http://b": dead_node()}, attempts=2
        )

        with pytest.raises(NetworkError):
            list(reader.fetch_logs())
        # Two rounds over both endpoints
        assert len(factory.created) == 4

    def test_get_logs_failure_is_retried_then_raised(self):
        node = live_node(block_number=10)
        node.eth.get_logs.side_effect = ValueError("query returned more than 10000 results")
        reader, _ = make_reader({"http://a": node}, attempts=3)

        with pytest.raises(NetworkError):
            list(reader.fetch_logs(from_block=0, to_block=10))
        assert node.eth.get_logs.call_count == 3
