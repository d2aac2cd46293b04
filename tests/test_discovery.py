from __future__ import annotations

import json
import socket
from unittest.mock import MagicMock

import pytest

from boltwood_alpaca.api.discovery import (
    DiscoveryServer,
    generate_device_id,
    is_discovery_request,
)


@pytest.mark.parametrize(
    "payload",
    [
        b"alpacadiscovery1",
        b"ALPACADISCOVERY1",
        b"  AlpacaDiscovery1\n",
        b'{"alpacadiscovery1": 1}',
        b'{"AlpacaDiscovery1": 1.0}',
        b'{"other": 2, "ALPACADISCOVERY1": 1}',
    ],
)
def test_valid_discovery_requests(payload: bytes) -> None:
    assert is_discovery_request(payload)


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        b"alpacadiscovery2",
        b'{"unrelated": 1}',
        b'{"alpacadiscovery1": 2}',
        b'{"alpacadiscovery1": "1"}',
        b'{"alpacadiscovery1": true}',
        b"[1]",
        b"\xff\xfe",
    ],
)
def test_invalid_discovery_requests(payload: bytes) -> None:
    assert not is_discovery_request(payload)


def test_valid_request_gets_reply() -> None:
    server = DiscoveryServer(11111, "4242")
    server.socket = MagicMock()

    assert server.handle_datagram(b"ALPACADISCOVERY1", ("192.168.1.20", 40000)) is True

    payload, addr = server.socket.sendto.call_args.args
    assert addr == ("192.168.1.20", 40000)
    assert json.loads(payload) == {"alpacaPort": 11111, "version": 1, "id": "4242"}


def test_unrelated_payload_gets_no_reply() -> None:
    server = DiscoveryServer(11111, "4242")
    server.socket = MagicMock()

    assert server.handle_datagram(b'{"unrelated": 1}', ("192.168.1.20", 40000)) is False
    server.socket.sendto.assert_not_called()


def test_send_failure_is_not_raised() -> None:
    server = DiscoveryServer(11111, "4242")
    server.socket = MagicMock()
    server.socket.sendto.side_effect = OSError("network unreachable")

    assert server.handle_datagram(b"alpacadiscovery1", ("10.0.0.1", 32227)) is False


def test_generated_device_id_range() -> None:
    for _ in range(200):
        assert 1 <= int(generate_device_id()) <= 65535


def test_loopback_discovery_round_trip() -> None:
    server = DiscoveryServer(8123, "777", discovery_port=0)
    server.start()
    client = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    client.settimeout(5.0)
    try:
        replies = []
        for _ in range(2):
            client.sendto(b"alpacadiscovery1", ("127.0.0.1", server.bound_port))
            data, _ = client.recvfrom(1024)
            replies.append(json.loads(data))

        client.sendto(b'{"unrelated": 1}', ("127.0.0.1", server.bound_port))
        client.settimeout(0.5)
        with pytest.raises(socket.timeout):
            client.recvfrom(1024)
    finally:
        client.close()
        server.stop()

    assert replies[0] == {"alpacaPort": 8123, "version": 1, "id": "777"}
    # identity stays the same for the life of the server
    assert replies[1]["id"] == replies[0]["id"]
