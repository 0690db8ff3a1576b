"""
Pytest fixtures for Identity Prism tests.

fake_ledger serves JSON-RPC over httpx.MockTransport so ledger, builder and
API tests run without Helius. raw_asset builds getAssetsByOwner items.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from identity_prism.config.settings import Settings

VALID_WALLET = "So11111111111111111111111111111111111111112"
NOW = 1_700_000_000.0
DAY = 86400


class FakeLedger:
    """In-memory Helius stand-in. failures maps a URL substring to an HTTP status or "rpc_error"."""

    def __init__(self) -> None:
        self.balance = 0
        self.signatures: list[dict[str, Any]] = []
        self.token_accounts: list[dict[str, Any]] = []
        self.assets: list[dict[str, Any]] = []
        self.failures: dict[str, Any] = {}
        self.calls: list[dict[str, Any]] = []

    def add_signatures(self, count: int, *, newest: float = NOW, spacing_sec: float = 60.0) -> None:
        """Append count signatures, newest first, spacing_sec apart."""
        start = len(self.signatures)
        for i in range(count):
            n = start + i
            self.signatures.append(
                {
                    "signature": f"sig{n}",
                    "slot": 1_000_000 - n,
                    "err": None,
                    "memo": None,
                    "blockTime": int(newest - n * spacing_sec),
                    "confirmationStatus": "finalized",
                }
            )

    def add_token_account(self, mint: str, ui_amount: float, decimals: int) -> None:
        self.token_accounts.append(
            {
                "pubkey": f"ata-{mint[:8]}-{len(self.token_accounts)}",
                "account": {
                    "data": {
                        "parsed": {
                            "info": {
                                "mint": mint,
                                "tokenAmount": {"uiAmount": ui_amount, "decimals": decimals},
                            },
                            "type": "account",
                        },
                        "program": "spl-token",
                    }
                },
            }
        )

    def methods(self, url_part: str | None = None) -> list[str]:
        return [c["method"] for c in self.calls if url_part is None or url_part in c["url"]]

    def urls(self, method: str) -> list[str]:
        return [c["url"] for c in self.calls if c["method"] == method]

    def _signature_page(self, opts: dict[str, Any]) -> list[dict[str, Any]]:
        limit = opts.get("limit", 1000)
        before = opts.get("before")
        start = 0
        if before is not None:
            index = [s["signature"] for s in self.signatures].index(before)
            start = index + 1
        return self.signatures[start:start + limit]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]
        params = body["params"]
        url = str(request.url)
        self.calls.append(
            {"url": url, "method": method, "params": params, "headers": dict(request.headers), "id": body["id"]}
        )
        for marker, failure in self.failures.items():
            if marker in url:
                if failure == "rpc_error":
                    return httpx.Response(
                        200,
                        json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": "boom"}},
                    )
                return httpx.Response(failure, json={"error": "unavailable"})

        if method == "getBalance":
            result: Any = {"context": {"slot": 1}, "value": self.balance}
        elif method == "getSignaturesForAddress":
            result = self._signature_page(params[1])
        elif method == "getTokenAccountsByOwner":
            result = {"context": {"slot": 1}, "value": self.token_accounts}
        elif method == "getAssetsByOwner":
            result = {"total": len(self.assets), "limit": 1000, "page": 1, "items": self.assets}
        else:
            return httpx.Response(400, json={"error": f"unknown method {method}"})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def settings() -> Settings:
    """Three direct API keys, no proxy, no storage."""
    return Settings(helius_api_keys=("key-a", "key-b", "key-c"))


@pytest.fixture
def raw_asset():
    """Factory for getAssetsByOwner items."""

    def _make(
        asset_id: str,
        *,
        name: str | None = None,
        symbol: str | None = None,
        image: str | None = None,
        interface: str | None = None,
        collection: str | None = None,
        decimals: Any = None,
        supply: Any = None,
        balance: Any = None,
        compressed: bool = False,
        authorities: tuple[str, ...] = (),
        creators: tuple[str, ...] = (),
    ) -> dict[str, Any]:
        metadata: dict[str, Any] = {}
        if name is not None:
            metadata["name"] = name
        if symbol is not None:
            metadata["symbol"] = symbol
        item: dict[str, Any] = {
            "id": asset_id,
            "content": {"metadata": metadata, "links": {"image": image} if image else {}},
            "grouping": [{"group_key": "collection", "group_value": collection}] if collection else [],
            "authorities": [{"address": a, "scopes": ["full"]} for a in authorities],
            "creators": [{"address": c, "share": 100, "verified": True} for c in creators],
            "compression": {"compressed": compressed},
        }
        if interface is not None:
            item["interface"] = interface
        token_info = {
            key: value
            for key, value in (("decimals", decimals), ("supply", supply), ("balance", balance))
            if value is not None
        }
        if token_info:
            item["token_info"] = token_info
        return item

    return _make
