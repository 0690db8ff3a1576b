"""
Pytest tests for LedgerClient: RPC shapes, pagination, endpoint fallback.

HTTP goes through httpx.MockTransport (fake_ledger fixture); async code is
driven with asyncio.run.
"""

from __future__ import annotations

import asyncio

import pytest

from identity_prism.core.exceptions import (
    AllEndpointsFailed,
    EndpointError,
    ErrorKind,
    InvalidAddress,
    MalformedUpstreamResponse,
    NoEndpointsConfigured,
    RateLimited,
)
from identity_prism.ledger.client import (
    MAX_SIGNATURE_PAGES,
    SIGNATURES_PAGE_LIMIT,
    TOKEN_PROGRAM_ID,
    LedgerClient,
    validate_address,
)
from identity_prism.ledger.endpoints import Endpoint

VALID_WALLET = "So11111111111111111111111111111111111111112"


def _endpoints(n: int) -> list[Endpoint]:
    return [Endpoint(url=f"https://rpc{i}.example.com/?api-key=key{i}") for i in range(n)]


def _run(fake_ledger, endpoints, fn):
    async def _go():
        async with fake_ledger.http_client() as http:
            client = LedgerClient(endpoints, http_client=http)
            return await fn(client)

    return asyncio.run(_go())


# --- Address validation ---


def test_validate_address_accepts_and_strips():
    assert validate_address(f"  {VALID_WALLET} ") == VALID_WALLET


@pytest.mark.parametrize("bad", ["", "   ", "not-a-key", "0OIl" * 11, VALID_WALLET + "2"])
def test_validate_address_rejects(bad):
    with pytest.raises(InvalidAddress) as exc_info:
        validate_address(bad)
    assert exc_info.value.kind == ErrorKind.INVALID_ADDRESS


# --- Single calls ---


def test_get_balance(fake_ledger):
    fake_ledger.balance = 12_000_000_000
    endpoint = _endpoints(1)[0]
    assert _run(fake_ledger, [endpoint], lambda c: c.get_balance(endpoint, VALID_WALLET)) == 12_000_000_000
    call = fake_ledger.calls[0]
    assert call["method"] == "getBalance"
    assert call["params"] == [VALID_WALLET]


def test_get_token_accounts_request_shape(fake_ledger):
    fake_ledger.add_token_account("mintA", 3.0, 6)
    fake_ledger.token_accounts.append({"account": {"data": "base64-not-parsed"}})
    endpoint = _endpoints(1)[0]
    accounts = _run(fake_ledger, [endpoint], lambda c: c.get_token_accounts(endpoint, VALID_WALLET))
    assert [(a.mint, a.ui_amount, a.decimals) for a in accounts] == [("mintA", 3.0, 6)]
    params = fake_ledger.calls[0]["params"]
    assert params == [VALID_WALLET, {"programId": TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed"}]


def test_get_assets_by_owner_request_shape(fake_ledger, raw_asset):
    fake_ledger.assets = [raw_asset("a1", name="One"), {"no": "id"}]
    endpoint = _endpoints(1)[0]
    assets = _run(fake_ledger, [endpoint], lambda c: c.get_assets_by_owner(endpoint, VALID_WALLET))
    assert [a.id for a in assets] == ["a1"]
    call = fake_ledger.calls[0]
    assert call["method"] == "getAssetsByOwner"
    assert call["id"] == "identity-prism-scan"
    assert call["params"] == {
        "ownerAddress": VALID_WALLET,
        "page": 1,
        "limit": 1000,
        "displayOptions": {"showCollectionMetadata": True},
    }


# --- Signature pagination ---


def test_signatures_single_short_page(fake_ledger):
    fake_ledger.add_signatures(5)
    endpoint = _endpoints(1)[0]
    sigs = _run(fake_ledger, [endpoint], lambda c: c.get_signatures(endpoint, VALID_WALLET))
    assert len(sigs) == 5
    assert fake_ledger.methods() == ["getSignaturesForAddress"]
    assert fake_ledger.calls[0]["params"][1] == {"limit": SIGNATURES_PAGE_LIMIT}


def test_signatures_follow_before_cursor(fake_ledger):
    """2500 signatures: pages of 1000, 1000, 500 with the last signature as cursor."""
    fake_ledger.add_signatures(2500)
    endpoint = _endpoints(1)[0]
    sigs = _run(fake_ledger, [endpoint], lambda c: c.get_signatures(endpoint, VALID_WALLET))
    assert len(sigs) == 2500
    assert len({s.signature for s in sigs}) == 2500
    opts = [c["params"][1] for c in fake_ledger.calls]
    assert opts[0] == {"limit": 1000}
    assert opts[1] == {"limit": 1000, "before": "sig999"}
    assert opts[2] == {"limit": 1000, "before": "sig1999"}


def test_signatures_exact_multiple_stops_on_empty_page(fake_ledger):
    fake_ledger.add_signatures(2000)
    endpoint = _endpoints(1)[0]
    sigs = _run(fake_ledger, [endpoint], lambda c: c.get_signatures(endpoint, VALID_WALLET))
    assert len(sigs) == 2000
    assert len(fake_ledger.calls) == 3


def test_signatures_capped_at_ten_pages(fake_ledger):
    fake_ledger.add_signatures(10_500)
    endpoint = _endpoints(1)[0]
    sigs = _run(fake_ledger, [endpoint], lambda c: c.get_signatures(endpoint, VALID_WALLET))
    assert len(sigs) == MAX_SIGNATURE_PAGES * SIGNATURES_PAGE_LIMIT
    assert len(fake_ledger.calls) == MAX_SIGNATURE_PAGES


# --- Error mapping ---


def test_http_429_is_rate_limited(fake_ledger):
    fake_ledger.failures["rpc0"] = 429
    endpoint = _endpoints(1)[0]
    with pytest.raises(RateLimited):
        _run(fake_ledger, [endpoint], lambda c: c.get_balance(endpoint, VALID_WALLET))


def test_rpc_error_payload_is_malformed_response(fake_ledger):
    fake_ledger.failures["rpc0"] = "rpc_error"
    endpoint = _endpoints(1)[0]
    with pytest.raises(MalformedUpstreamResponse) as exc_info:
        _run(fake_ledger, [endpoint], lambda c: c.get_balance(endpoint, VALID_WALLET))
    assert exc_info.value.code == -32000
    assert "boom" in str(exc_info.value)


def test_http_500_is_endpoint_error(fake_ledger):
    fake_ledger.failures["rpc0"] = 500
    endpoint = _endpoints(1)[0]
    with pytest.raises(EndpointError) as exc_info:
        _run(fake_ledger, [endpoint], lambda c: c.get_balance(endpoint, VALID_WALLET))
    assert exc_info.value.status_code == 500


# --- Endpoint fallback ---


def test_fallback_moves_to_next_endpoint_never_repeats(fake_ledger):
    """First 2 of 4 endpoints fail: exactly 3 endpoints are tried, in order."""
    fake_ledger.failures["rpc0"] = 503
    fake_ledger.failures["rpc1"] = 429
    fake_ledger.balance = 7
    endpoints = _endpoints(4)

    result = _run(fake_ledger, endpoints, lambda c: c.with_fallback(lambda e: c.get_balance(e, VALID_WALLET), label="balance"))

    assert result == 7
    hosts = [url.split("/")[2] for url in fake_ledger.urls("getBalance")]
    assert hosts == ["rpc0.example.com", "rpc1.example.com", "rpc2.example.com"]


def test_fallback_exhaustion_raises_all_endpoints_failed(fake_ledger):
    for i in range(3):
        fake_ledger.failures[f"rpc{i}"] = 502
    endpoints = _endpoints(3)
    with pytest.raises(AllEndpointsFailed) as exc_info:
        _run(fake_ledger, endpoints, lambda c: c.with_fallback(lambda e: c.get_balance(e, VALID_WALLET), label="balance"))
    err = exc_info.value
    assert err.attempts == 3
    assert isinstance(err.last_error, EndpointError)
    assert err.kind == ErrorKind.ALL_ENDPOINTS_FAILED
    assert len(fake_ledger.urls("getBalance")) == 3


def test_fallback_exhaustion_on_429_reports_rate_limited(fake_ledger):
    fake_ledger.failures["rpc0"] = 429
    with pytest.raises(AllEndpointsFailed) as exc_info:
        _run(fake_ledger, _endpoints(1), lambda c: c.with_fallback(lambda e: c.get_balance(e, VALID_WALLET), label="balance"))
    assert exc_info.value.kind == ErrorKind.RATE_LIMITED


def test_no_endpoints_configured(fake_ledger):
    with pytest.raises(NoEndpointsConfigured):
        _run(fake_ledger, [], lambda c: c.fetch_assets(VALID_WALLET))
    assert fake_ledger.calls == []


def test_non_endpoint_errors_propagate_without_rotation(fake_ledger):
    async def _boom(endpoint):
        raise KeyError("bug")

    with pytest.raises(KeyError):
        _run(fake_ledger, _endpoints(3), lambda c: c.with_fallback(_boom, label="bug"))


# --- Combined fetches ---


def test_fetch_account_data_runs_three_queries_per_endpoint(fake_ledger):
    fake_ledger.balance = 2_000_000_000
    fake_ledger.add_signatures(3)
    fake_ledger.add_token_account("mintA", 1.0, 0)
    data = _run(fake_ledger, _endpoints(2), lambda c: c.fetch_account_data(VALID_WALLET))
    assert data.balance_lamports == 2_000_000_000
    assert len(data.signatures) == 3
    assert len(data.token_accounts) == 1
    assert sorted(fake_ledger.methods()) == ["getBalance", "getSignaturesForAddress", "getTokenAccountsByOwner"]
    assert all("rpc0" in c["url"] for c in fake_ledger.calls)


def test_fetch_account_data_falls_back_as_a_unit(fake_ledger):
    """A failure in any of the three calls moves the whole group to the next endpoint."""
    fake_ledger.failures["rpc0"] = "rpc_error"
    fake_ledger.balance = 1
    data = _run(fake_ledger, _endpoints(2), lambda c: c.fetch_account_data(VALID_WALLET))
    assert data.balance_lamports == 1
    assert {m for m in fake_ledger.methods("rpc1")} == {
        "getBalance",
        "getSignaturesForAddress",
        "getTokenAccountsByOwner",
    }


def test_proxy_header_is_sent(fake_ledger):
    endpoint = Endpoint(url="https://proxy.example.com/rpc", headers={"x-wallet-address": VALID_WALLET})
    _run(fake_ledger, [endpoint], lambda c: c.fetch_assets(VALID_WALLET))
    assert fake_ledger.calls[0]["headers"]["x-wallet-address"] == VALID_WALLET
