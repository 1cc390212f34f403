"""
JSON-RPC client for the local pNode daemon.

Mirrors the request you would send by hand::

    curl -X POST http://127.0.0.1:6000/rpc \\
         -H "Content-Type: application/json" \\
         -d '{"jsonrpc":"2.0","method":"get-pods","id":1}'
"""

import time
from typing import Any, Optional, Sequence

import httpx

JSONRPC_VERSION = "2.0"


class RpcClientError(Exception):
    """Base class for RPC client failures."""


class TransportError(RpcClientError):
    """The HTTP layer failed: connection error, timeout or non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class RpcError(RpcClientError):
    """The endpoint answered with a JSON-RPC error object."""

    def __init__(self, code: Any, message: str):
        super().__init__(f"RPC error ({code}): {message}")
        self.code = code
        self.message = message


def build_request(method: str, params: Sequence[Any] = ()) -> dict:
    """Build a JSON-RPC 2.0 request envelope with a time-based id."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": int(time.time() * 1000),
        "method": method,
        "params": list(params),
    }


class RpcClient:
    """
    Client for a single JSON-RPC endpoint.

    Every call is a one-shot POST; there is no retry. The client owns an
    ``httpx.AsyncClient`` and must be closed (or used as an async context
    manager) when no longer needed.
    """

    def __init__(
        self,
        url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def call(self, method: str, params: Sequence[Any] = ()) -> Any:
        """
        Invoke ``method`` and return the ``result`` field of the response.

        Raises:
            TransportError: the request could not be completed or returned a non-2xx status.
            RpcError: the response carried an ``error`` object.
        """
        payload = build_request(method, params)

        try:
            response = await self.client.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"RPC request failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"RPC request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                reason=response.reason_phrase,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"RPC request failed: invalid JSON response ({e})") from e

        if not isinstance(data, dict):
            return None

        error = data.get("error")
        # an empty error object still signals failure
        if isinstance(error, (dict, list)) or error:
            if isinstance(error, dict):
                raise RpcError(error.get("code"), error.get("message", ""))
            raise RpcError(None, str(error))

        return data.get("result")
