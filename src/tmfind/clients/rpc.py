"""Lightweight HTTP client for Tendermint/CometBFT RPC nodes.

This module provides:
- `RPC`: an async client with sane timeouts/connection limits
- `wrap_tx_result`: reshape a ``/tx`` result into a subscription-style message

The wrapped message goes through the same pipeline as websocket frames.
"""

from __future__ import annotations

from typing import Any

import httpx


def normalize_tx_hash(tx_hash: str) -> str:
    """Return a 0x-prefixed upper-case hex hash as the ``/tx`` endpoint expects."""
    h = tx_hash.strip()
    if h[:2].lower() == "0x":
        h = h[2:]
    return "0x" + h.upper()


def wrap_tx_result(result: dict[str, Any]) -> dict[str, Any]:
    """Wrap a ``/tx`` result as ``result.data.value.TxResult`` (what subscriptions push)."""
    return {
        "jsonrpc": "2.0",
        "result": {
            "data": {
                "value": {
                    "TxResult": {
                        "height": str(result.get("height", "0")),
                        "hash": result.get("hash"),
                        "tx_result": result.get("tx_result") or {},
                    }
                }
            }
        },
    }


def _check(data: dict[str, Any]) -> dict[str, Any]:
    if "error" in data:
        err = data["error"]
        msg = err.get("message") if isinstance(err, dict) else str(err)
        data_msg = err.get("data") if isinstance(err, dict) else None
        raise RuntimeError(f"RPC error: {msg}" + (f" ({data_msg})" if data_msg else ""))
    return data.get("result") or {}


class RPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL (``https://host:26657``).
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    """

    def __init__(self, url: str, *, timeout_s: int = 20, max_connections: int = 16) -> None:
        self.url = url.rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
        )

    async def latest_height(self) -> int:
        """Return the node's latest block height as an int."""
        r = await self.client.get(f"{self.url}/status")
        r.raise_for_status()
        result = _check(r.json())
        return int(result["sync_info"]["latest_block_height"])

    async def get_tx(self, tx_hash: str) -> dict[str, Any]:
        """Fetch one transaction and return it wrapped as a subscription message."""
        r = await self.client.get(f"{self.url}/tx", params={"hash": normalize_tx_hash(tx_hash)})
        r.raise_for_status()
        return wrap_tx_result(_check(r.json()))

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
