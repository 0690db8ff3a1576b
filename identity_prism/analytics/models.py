"""
Snapshot data model: tiers, traits and the immutable wallet snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from identity_prism.core.exceptions import ErrorKind


class TierLabel(str, Enum):
    """Planet tiers, lowest first. BINARY_SUN is only reachable through the combo trait."""

    MERCURY = "mercury"
    MARS = "mars"
    VENUS = "venus"
    EARTH = "earth"
    NEPTUNE = "neptune"
    URANUS = "uranus"
    SATURN = "saturn"
    JUPITER = "jupiter"
    SUN = "sun"
    BINARY_SUN = "binary_sun"

    @property
    def rank(self) -> int:
        return list(TierLabel).index(self)


class SnapshotState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class WalletTraits:
    """
    Everything the score is computed from. Derived only from ledger data
    and constants; planet_tier is filled in by the aggregator after scoring.

    avg_tx_per_day_30d is tx_count / max(1, wallet_age_days): a lifetime
    average, kept under its historical name.
    """

    sol_balance: float = 0.0
    wallet_age_days: int = 0
    tx_count: int = 0
    unique_token_count: int = 0
    nft_count: int = 0
    avg_tx_per_day_30d: float = 0.0
    has_seeker: bool = False
    has_preorder: bool = False
    has_combo: bool = False
    is_og: bool = False
    is_whale: bool = False
    is_collector: bool = False
    is_early_adopter: bool = False
    is_tx_titan: bool = False
    is_solana_maxi: bool = False
    is_blue_chip: bool = False
    is_defi_king: bool = False
    is_meme_lord: bool = False
    hyperactive_degen: bool = False
    diamond_hands: bool = False
    planet_tier: TierLabel = TierLabel.MERCURY
    meme_coins_held: tuple[str, ...] = ()
    meme_value_usd: float = 0.0
    total_assets_count: int = 0
    sol_tier: str | None = None
    days_since_last_tx: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """camelCase wire shape."""
        return {
            "solBalance": self.sol_balance,
            "walletAgeDays": self.wallet_age_days,
            "txCount": self.tx_count,
            "uniqueTokenCount": self.unique_token_count,
            "nftCount": self.nft_count,
            "avgTxPerDay30d": self.avg_tx_per_day_30d,
            "hasSeeker": self.has_seeker,
            "hasPreorder": self.has_preorder,
            "hasCombo": self.has_combo,
            "isOG": self.is_og,
            "isWhale": self.is_whale,
            "isCollector": self.is_collector,
            "isEarlyAdopter": self.is_early_adopter,
            "isTxTitan": self.is_tx_titan,
            "isSolanaMaxi": self.is_solana_maxi,
            "isBlueChip": self.is_blue_chip,
            "isDeFiKing": self.is_defi_king,
            "isMemeLord": self.is_meme_lord,
            "hyperactiveDegen": self.hyperactive_degen,
            "diamondHands": self.diamond_hands,
            "planetTier": self.planet_tier.value,
            "memeCoinsHeld": list(self.meme_coins_held),
            "memeValueUsd": self.meme_value_usd,
            "totalAssetsCount": self.total_assets_count,
            "solTier": self.sol_tier,
            "daysSinceLastTx": self.days_since_last_tx,
        }


@dataclass(frozen=True)
class WalletSnapshot:
    """
    Result of one snapshot build. Never mutated; a refresh produces a new one.

    On failure traits is None, score is 0, tier is mercury and error/message are set.
    """

    address: str
    score: int = 0
    tier: TierLabel = TierLabel.MERCURY
    traits: WalletTraits | None = None
    error: ErrorKind | None = None
    message: str | None = None
    badges: tuple[str, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, address: str, error: ErrorKind, message: str) -> "WalletSnapshot":
        return cls(address=address, error=error, message=message)
