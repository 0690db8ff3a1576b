"""
Async JSON-RPC client for wallet ledger reads.

Responsibilities:
- Validate the wallet address before any network call.
- Issue getBalance, paginated getSignaturesForAddress, getTokenAccountsByOwner
  and the indexed getAssetsByOwner query over httpx.
- Walk the ordered endpoint list once per request chain: a failed endpoint is
  never retried, the next one is tried instead. Exhaustion raises
  AllEndpointsFailed carrying the last error.

Signature history is capped at MAX_SIGNATURE_PAGES * SIGNATURES_PAGE_LIMIT;
wallets beyond the cap get an understated tx count and age.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Sequence, TypeVar

import httpx
from solders.pubkey import Pubkey

from identity_prism.core.exceptions import (
    AllEndpointsFailed,
    EndpointError,
    InvalidAddress,
    MalformedUpstreamResponse,
    NoEndpointsConfigured,
    RateLimited,
)
from identity_prism.ledger.endpoints import Endpoint
from identity_prism.ledger.models import (
    AccountData,
    AssetRecord,
    SignatureInfo,
    TokenAccount,
    decode_asset,
    decode_token_account,
)
from identity_prism.prism_logging import get_logger, short_wallet

logger = get_logger(__name__)

T = TypeVar("T")

SIGNATURES_PAGE_LIMIT = 1000
MAX_SIGNATURE_PAGES = 10
ASSETS_PAGE_LIMIT = 1000
ASSETS_REQUEST_ID = "identity-prism-scan"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
DEFAULT_TIMEOUT_SEC = 30.0

# JSON-RPC request id counter
_request_id = 0


def _next_id() -> int:
    global _request_id
    _request_id += 1
    return _request_id


def _build_rpc_body(method: str, params: Any, request_id: int | str | None = None) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id if request_id is not None else _next_id(),
        "method": method,
        "params": params,
    }


def validate_address(address: str) -> str:
    """
    Return the stripped address if it parses as a base58 32-byte public key.

    Raises:
        InvalidAddress: empty or malformed; callers must not retry.
    """
    candidate = (address or "").strip()
    if not candidate:
        raise InvalidAddress(address, "empty")
    try:
        Pubkey.from_string(candidate)
    except (ValueError, TypeError) as e:
        raise InvalidAddress(candidate, str(e)) from e
    return candidate


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """asyncio.gather that cancels the siblings when one of them fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


class LedgerClient:
    """
    Ledger reads against an ordered list of endpoints.

    The endpoint order is decided by the caller (see build_endpoints); this
    class only walks it. Pass http_client to share a connection pool or to
    inject a mock transport; otherwise one is created and closed by aclose().
    """

    def __init__(
        self,
        endpoints: Sequence[Endpoint],
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        if timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        self._endpoints = list(endpoints)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))

    @property
    def endpoints(self) -> list[Endpoint]:
        return list(self._endpoints)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LedgerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _rpc(
        self,
        endpoint: Endpoint,
        method: str,
        params: Any,
        request_id: int | str | None = None,
    ) -> Any:
        """Perform one JSON-RPC call; raise an EndpointError subclass on any failure."""
        body = _build_rpc_body(method, params, request_id)
        try:
            resp = await self._client.post(endpoint.url, json=body, headers=endpoint.headers)
        except httpx.HTTPError as e:
            raise EndpointError(f"{method} transport error: {e}") from e
        if resp.status_code == 429:
            raise RateLimited(f"{method} rate limited (HTTP 429)")
        if not resp.is_success:
            raise EndpointError(f"{method} HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedUpstreamResponse(f"{method} returned non-JSON body") from e
        if not isinstance(data, dict):
            raise MalformedUpstreamResponse(f"{method} returned {type(data).__name__}, expected object")
        err = data.get("error")
        if err is not None:
            if isinstance(err, dict):
                raise MalformedUpstreamResponse(
                    f"{method} RPC error: {err.get('message', err)} (code={err.get('code')})",
                    code=err.get("code"),
                )
            raise MalformedUpstreamResponse(f"{method} RPC error: {err}")
        result = data.get("result")
        if result is None:
            raise MalformedUpstreamResponse(f"{method} returned no result")
        return result

    async def get_balance(self, endpoint: Endpoint, address: str) -> int:
        """Lamport balance."""
        result = await self._rpc(endpoint, "getBalance", [address])
        value = result.get("value") if isinstance(result, dict) else result
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedUpstreamResponse(f"getBalance returned unexpected value {value!r}")
        return value

    async def get_signatures(self, endpoint: Endpoint, address: str) -> list[SignatureInfo]:
        """
        Signature history, newest first, up to MAX_SIGNATURE_PAGES pages.

        Each page uses the last signature of the previous page as the
        "before" cursor. Stops on a short or empty page.
        """
        signatures: list[SignatureInfo] = []
        before: str | None = None
        for page in range(MAX_SIGNATURE_PAGES):
            opts: dict[str, Any] = {"limit": SIGNATURES_PAGE_LIMIT}
            if before is not None:
                opts["before"] = before
            raw = await self._rpc(endpoint, "getSignaturesForAddress", [address, opts])
            if not isinstance(raw, list):
                raise MalformedUpstreamResponse("getSignaturesForAddress returned non-list result")
            batch: list[SignatureInfo] = []
            for item in raw:
                if not isinstance(item, dict) or "signature" not in item:
                    continue
                try:
                    batch.append(SignatureInfo.from_rpc_item(item))
                except (KeyError, TypeError, ValueError) as e:
                    logger.debug("ledger_skip_signature_item", error=str(e))
            signatures.extend(batch)
            if len(raw) < SIGNATURES_PAGE_LIMIT or not batch:
                break
            before = batch[-1].signature
        else:
            logger.info(
                "ledger_signature_cap_reached",
                wallet=short_wallet(address),
                pages=MAX_SIGNATURE_PAGES,
                signature_count=len(signatures),
            )
        return signatures

    async def get_token_accounts(self, endpoint: Endpoint, address: str) -> list[TokenAccount]:
        """Parsed SPL token accounts owned by address (Token program only)."""
        result = await self._rpc(
            endpoint,
            "getTokenAccountsByOwner",
            [address, {"programId": TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed"}],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, list):
            raise MalformedUpstreamResponse("getTokenAccountsByOwner returned no value list")
        accounts = []
        for raw in value:
            account = decode_token_account(raw)
            if account is not None:
                accounts.append(account)
        return accounts

    async def get_assets_by_owner(self, endpoint: Endpoint, address: str) -> list[AssetRecord]:
        """First page (up to ASSETS_PAGE_LIMIT) of the indexed assets-by-owner query."""
        params = {
            "ownerAddress": address,
            "page": 1,
            "limit": ASSETS_PAGE_LIMIT,
            "displayOptions": {"showCollectionMetadata": True},
        }
        result = await self._rpc(endpoint, "getAssetsByOwner", params, request_id=ASSETS_REQUEST_ID)
        items = result.get("items") if isinstance(result, dict) else None
        if not isinstance(items, list):
            raise MalformedUpstreamResponse("getAssetsByOwner returned no items list")
        assets = []
        for raw in items:
            asset = decode_asset(raw)
            if asset is not None:
                assets.append(asset)
        return assets

    async def with_fallback(
        self,
        runner: Callable[[Endpoint], Awaitable[T]],
        *,
        label: str,
    ) -> T:
        """
        Run runner against each endpoint in order until one succeeds.

        Each endpoint is tried at most once. Only EndpointError moves on to
        the next endpoint; anything else propagates immediately.
        """
        if not self._endpoints:
            raise NoEndpointsConfigured()
        last_error: EndpointError | None = None
        total = len(self._endpoints)
        for attempt, endpoint in enumerate(self._endpoints, start=1):
            try:
                result = await runner(endpoint)
            except EndpointError as e:
                last_error = e
                logger.warning(
                    "ledger_endpoint_failed",
                    label=label,
                    endpoint=endpoint.label,
                    attempt=attempt,
                    total=total,
                    error_kind=e.kind.value,
                    error=str(e),
                )
                continue
            if attempt > 1:
                logger.info("ledger_endpoint_recovered", label=label, attempt=attempt, total=total)
            return result
        assert last_error is not None
        raise AllEndpointsFailed(label, total, last_error)

    async def fetch_account_data(self, address: str) -> AccountData:
        """Balance, signatures and token accounts, fetched concurrently per endpoint attempt."""

        async def _run(endpoint: Endpoint) -> AccountData:
            balance, signatures, token_accounts = await gather_all(
                self.get_balance(endpoint, address),
                self.get_signatures(endpoint, address),
                self.get_token_accounts(endpoint, address),
            )
            return AccountData(
                balance_lamports=balance,
                signatures=tuple(signatures),
                token_accounts=tuple(token_accounts),
            )

        data = await self.with_fallback(_run, label="account_data")
        logger.info(
            "ledger_account_data_done",
            wallet=short_wallet(address),
            balance_lamports=data.balance_lamports,
            signature_count=len(data.signatures),
            token_account_count=len(data.token_accounts),
        )
        return data

    async def fetch_assets(self, address: str) -> list[AssetRecord]:
        """Indexed assets, on its own fallback chain."""
        assets = await self.with_fallback(
            lambda endpoint: self.get_assets_by_owner(endpoint, address),
            label="assets_by_owner",
        )
        logger.info("ledger_assets_done", wallet=short_wallet(address), asset_count=len(assets))
        return assets
