"""
Endpoint list construction and hash-seeded rotation.

With a proxy configured there is exactly one endpoint ({proxy}/rpc) and the
wallet travels in the x-wallet-address header. Otherwise there is one Helius
URL per API key, rotated so the starting key is chosen by a deterministic
hash of the address. Spreads load across keys; on failure the client walks
forward through the rotated list.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence, TypeVar

from identity_prism.config.settings import Settings

T = TypeVar("T")

HASH_MODULUS = 2147483647
HASH_MULTIPLIER = 31
WALLET_HEADER = "x-wallet-address"
PROXY_RPC_PATH = "/rpc"

_API_KEY_RE = re.compile(r"(api-key=)[^&]+")


@dataclass(frozen=True)
class Endpoint:
    """One RPC target: URL plus extra request headers."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def label(self) -> str:
        """URL with the API key redacted, for logs."""
        return _API_KEY_RE.sub(r"\1***", self.url)


def seed_index(seed: str, count: int) -> int:
    """
    Deterministic start index for a seed string.

    h = (h * 31 + code point) mod 2^31-1 over the seed, then abs(h) mod count.
    Returns 0 for an empty seed and -1 when count is 0.
    """
    if count <= 0:
        return -1
    if not seed:
        return 0
    h = 0
    for ch in seed:
        h = (h * HASH_MULTIPLIER + ord(ch)) % HASH_MODULUS
    return abs(h) % count


def rotate_endpoints(items: Sequence[T], seed: str) -> list[T]:
    """Return items rotated to start at seed_index(seed); each item appears once."""
    start = seed_index(seed, len(items))
    if start <= 0:
        return list(items)
    return list(items[start:]) + list(items[:start])


def helius_url(rpc_base: str, api_key: str) -> str:
    sep = "&" if "?" in rpc_base else "?"
    return f"{rpc_base}{sep}api-key={api_key}"


def build_endpoints(settings: Settings, address: str) -> list[Endpoint]:
    """
    Ordered endpoint list for one address.

    Proxy mode wins over API keys. Empty list when nothing is configured;
    the client turns that into NoEndpointsConfigured.
    """
    if settings.helius_proxy_url:
        return [
            Endpoint(
                url=settings.helius_proxy_url.rstrip("/") + PROXY_RPC_PATH,
                headers={WALLET_HEADER: address},
            )
        ]
    endpoints = [helius_url(settings.helius_rpc_base, key) for key in settings.helius_api_keys]
    return [Endpoint(url=url) for url in rotate_endpoints(endpoints, address)]
