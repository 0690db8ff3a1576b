"""
Mint request contract and the registry of pending requests.

A MintRequest is what the external mint step consumes: the finalized score,
tier, the trait subset shown on the NFT and the uploaded metadata URI.
Pending requests live in an ExpiringStore until the mint step claims them.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from identity_prism.analytics.models import WalletSnapshot, WalletTraits
from identity_prism.mint.expiring_store import ExpiringStore
from identity_prism.prism_logging import get_logger, short_wallet

logger = get_logger(__name__)

REQUEST_ID_BYTES = 16


def mint_trait_subset(traits: WalletTraits) -> dict[str, bool]:
    """The traits shown on the minted card."""
    return {
        "seeker": traits.has_seeker,
        "preorder": traits.has_preorder,
        "combo": traits.has_combo,
        "blueChip": traits.is_blue_chip,
        "memeLord": traits.is_meme_lord,
        "defiKing": traits.is_defi_king,
        "hyperactive": traits.hyperactive_degen,
        "diamondHands": traits.diamond_hands,
    }


@dataclass(frozen=True)
class MintRequest:
    address: str
    score: int
    tier: str
    traits: dict[str, bool]
    metadata_uri: str

    @classmethod
    def from_snapshot(cls, snapshot: WalletSnapshot, metadata_uri: str) -> "MintRequest":
        """Raises ValueError for a failed snapshot; only ready snapshots can be minted."""
        if snapshot.traits is None or not snapshot.ok:
            raise ValueError("cannot mint from a failed snapshot")
        return cls(
            address=snapshot.address,
            score=snapshot.score,
            tier=snapshot.tier.value,
            traits=mint_trait_subset(snapshot.traits),
            metadata_uri=metadata_uri,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "score": self.score,
            "tier": self.tier,
            "traits": dict(self.traits),
            "metadataUri": self.metadata_uri,
        }


class Minter(Protocol):
    """External mint step: turns a request into a transaction signature."""

    async def mint(self, request: MintRequest) -> str: ...


class MintRequestRegistry:
    """Pending mint requests keyed by a random request id, expiring after ttl_sec."""

    def __init__(
        self,
        ttl_sec: float,
        *,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store: ExpiringStore[MintRequest] = ExpiringStore(ttl_sec)
        self._clock = clock
        self._id_factory = id_factory or (lambda: secrets.token_hex(REQUEST_ID_BYTES))

    def __len__(self) -> int:
        return len(self._store)

    def register(self, request: MintRequest) -> str:
        now = self._clock()
        pruned = self._store.prune(now)
        request_id = self._id_factory()
        self._store.put(request_id, request, now)
        logger.info(
            "mint_request_registered",
            wallet=short_wallet(request.address),
            request_id=request_id,
            tier=request.tier,
            pruned=pruned,
        )
        return request_id

    def claim(self, request_id: str) -> MintRequest | None:
        """Consume a pending request; None if unknown, already claimed or expired."""
        request = self._store.take(request_id, self._clock())
        if request is None:
            logger.warning("mint_request_missing", request_id=request_id)
        return request

    async def fulfil(self, request_id: str, minter: Minter) -> str | None:
        """Claim the request and hand it to the minter; returns the signature."""
        request = self.claim(request_id)
        if request is None:
            return None
        signature = await minter.mint(request)
        logger.info("mint_request_fulfilled", wallet=short_wallet(request.address), request_id=request_id)
        return signature
