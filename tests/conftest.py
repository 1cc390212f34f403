"""Shared fixtures: fake JSON-RPC endpoint and sample pod data."""

import json

import httpx
import pytest

from pnode_bot.rpc import RpcClient

RPC_URL = "http://127.0.0.1:6000/rpc"


def rpc_result(result) -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


def rpc_failure(code: int, message: str) -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}})


@pytest.fixture
def sample_pods() -> list[dict]:
    return [
        {"address": "10.0.0.1:9001", "version": "0.4.0"},
        {"address": "10.0.0.2:9001", "version": "0.4.1"},
        {"address": "10.0.0.3:9001", "version": "0.4.1"},
        {"address": "10.0.0.4:9001", "version": "0.4.2"},
    ]


@pytest.fixture
def make_rpc():
    """Build an RpcClient whose requests are answered by ``handler``."""

    def _make(handler) -> RpcClient:
        return RpcClient(RPC_URL, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def recorded_requests():
    return []


@pytest.fixture
def pods_endpoint(sample_pods, recorded_requests):
    """Handler answering every call with the sample pods and total_count=4."""

    def _handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(json.loads(request.content))
        return rpc_result({"pods": sample_pods, "total_count": 4})

    return _handler
