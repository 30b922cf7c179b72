"""Read-only JSON-RPC client for the Akave ledger (EVM-compatible chain)."""

from __future__ import annotations

import itertools
from typing import Any, Optional

import httpx

from akave_api.config import Settings, settings
from akave_api.errors import LedgerError
from akave_api.utils.logging import get_logger

log = get_logger(__name__)

# Akave Fuji
CHAIN_ID = 78963


def hex_to_int(value: Any) -> int:
    """Decode an Ethereum hex quantity such as ``"0x1b4"``."""
    if not isinstance(value, str) or not value.startswith("0x"):
        raise LedgerError(f"expected hex quantity, got {value!r}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise LedgerError(f"bad hex quantity {value!r}") from exc


class LedgerClient:
    """The two calls the correlator needs: block height and block bodies."""

    def __init__(
        self,
        cfg: Settings | None = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._cfg = cfg or settings
        self._url = self._cfg.akave_rpc_url
        self._client = client
        self._ids = itertools.count(1)

    async def _post(self, body: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self._url, json=body)
        async with httpx.AsyncClient(
            timeout=self._cfg.akave_rpc_timeout_seconds,
        ) as client:
            return await client.post(self._url, json=body)

    async def call(self, method: str, params: list[Any]) -> Any:
        """Send one JSON-RPC request and return its ``result``."""
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        resp = await self._post(body)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as exc:
            raise LedgerError("response is not JSON", method=method) from exc
        if not isinstance(data, dict):
            raise LedgerError("response is not an object", method=method)
        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise LedgerError(str(message), method=method)
        if "result" not in data:
            raise LedgerError("response has no result", method=method)
        log.debug("ledger.call", method=method, id=body["id"])
        return data["result"]

    async def block_number(self) -> int:
        return hex_to_int(await self.call("eth_blockNumber", []))

    async def get_block(
        self,
        height: int,
        full_transactions: bool = True,
    ) -> dict[str, Any]:
        """Fetch block *height*; with *full_transactions* each tx is a dict."""
        result = await self.call(
            "eth_getBlockByNumber", [hex(height), full_transactions],
        )
        if result is None:
            raise LedgerError(f"block {height} not found", method="eth_getBlockByNumber")
        if not isinstance(result, dict):
            raise LedgerError("block is not an object", method="eth_getBlockByNumber")
        return result
