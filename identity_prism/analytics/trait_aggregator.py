"""
Trait aggregator: account stats + classified assets -> WalletTraits.

Runs the classifier over every indexed asset, merges in the token-account
fallback pass, derives the composite traits and finally scores the result
so the returned traits carry their planet tier.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from identity_prism.analytics.asset_classifier import (
    AssetKind,
    Marker,
    classify_asset,
    scan_token_accounts,
)
from identity_prism.analytics.constants import MEME_LORD_THRESHOLD_USD
from identity_prism.analytics.models import WalletTraits
from identity_prism.analytics.scoring_engine import assign_tier, calculate_score
from identity_prism.ledger.models import AssetRecord, SignatureInfo, TokenAccount
from identity_prism.prism_logging import get_logger

logger = get_logger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000
SECONDS_PER_DAY = 86400

OG_MIN_SOL = 5.0
OG_MIN_AGE_DAYS = 730
OG_MIN_TX = 1000
WHALE_MIN_SOL = 50.0
COLLECTOR_MIN_NFTS = 10
EARLY_ADOPTER_MIN_AGE_DAYS = 730
TX_TITAN_MIN_TX = 1000  # strictly greater
MAXI_MIN_SOL = 100.0
MAXI_MIN_TX = 100  # strictly greater
DIAMOND_HANDS_MIN_AGE_DAYS = 60
HYPERACTIVE_MIN_AVG_TX = 8.0

SOL_TIER_WHALE = 10.0
SOL_TIER_DOLPHIN = 1.0
SOL_TIER_SHRIMP = 0.1


@dataclass(frozen=True)
class AccountStats:
    sol_balance: float
    wallet_age_days: int
    tx_count: int
    days_since_last_tx: int | None = None


def _days_between(later: float, earlier: float) -> int:
    return max(0, int((later - earlier) // SECONDS_PER_DAY))


def account_stats(
    balance_lamports: int,
    signatures: Sequence[SignatureInfo],
    now: float | None = None,
) -> AccountStats:
    """
    Balance in SOL, tx count and wallet age from the fetched signatures.

    Age is floor((now - oldest block_time) / 1 day), never negative, and 0
    when no signature carries a block time.
    """
    now = time.time() if now is None else now
    block_times = [s.block_time for s in signatures if s.block_time is not None]
    age_days = _days_between(now, min(block_times)) if block_times else 0
    since_last = _days_between(now, max(block_times)) if block_times else None
    return AccountStats(
        sol_balance=balance_lamports / LAMPORTS_PER_SOL,
        wallet_age_days=age_days,
        tx_count=len(signatures),
        days_since_last_tx=since_last,
    )


def sol_tier(sol_balance: float) -> str | None:
    if sol_balance >= SOL_TIER_WHALE:
        return "whale"
    if sol_balance >= SOL_TIER_DOLPHIN:
        return "dolphin"
    if sol_balance >= SOL_TIER_SHRIMP:
        return "shrimp"
    return None


def aggregate_traits(
    stats: AccountStats,
    assets: Sequence[AssetRecord],
    token_accounts: Iterable[TokenAccount] = (),
) -> WalletTraits:
    """Reduce stats and assets into scored WalletTraits."""
    nft_count = 0
    token_count = 0
    markers: set[Marker] = set()
    meme_symbols: list[str] = []
    meme_value = 0.0

    for asset in assets:
        result = classify_asset(asset)
        if result.kind is AssetKind.NFT:
            nft_count += 1
        else:
            token_count += 1
        markers |= result.markers
        if result.meme_symbol is not None:
            if result.meme_symbol not in meme_symbols:
                meme_symbols.append(result.meme_symbol)
            meme_value += result.meme_value_usd

    fallback = scan_token_accounts(token_accounts, {asset.id for asset in assets})
    nft_count += fallback.extra_nft_count
    token_count += fallback.extra_token_count
    for symbol in fallback.meme_symbols:
        if symbol not in meme_symbols:
            meme_symbols.append(symbol)
    meme_value += fallback.meme_value_usd

    has_seeker = Marker.SEEKER in markers
    has_preorder = Marker.PREORDER in markers or fallback.has_preorder
    has_lst = Marker.LIQUID_STAKING in markers or fallback.has_liquid_staking

    sol = stats.sol_balance
    age = stats.wallet_age_days
    tx = stats.tx_count
    avg_tx = tx / max(1, age)

    traits = WalletTraits(
        sol_balance=sol,
        wallet_age_days=age,
        tx_count=tx,
        unique_token_count=token_count,
        nft_count=nft_count,
        avg_tx_per_day_30d=avg_tx,
        has_seeker=has_seeker,
        has_preorder=has_preorder,
        has_combo=has_seeker and has_preorder,
        is_og=sol >= OG_MIN_SOL and age >= OG_MIN_AGE_DAYS and tx >= OG_MIN_TX,
        is_whale=sol >= WHALE_MIN_SOL,
        is_collector=nft_count >= COLLECTOR_MIN_NFTS,
        is_early_adopter=age >= EARLY_ADOPTER_MIN_AGE_DAYS,
        is_tx_titan=tx > TX_TITAN_MIN_TX,
        is_solana_maxi=sol >= MAXI_MIN_SOL and tx > MAXI_MIN_TX,
        is_blue_chip=Marker.BLUE_CHIP in markers,
        is_defi_king=has_lst or Marker.DEFI in markers,
        is_meme_lord=meme_value >= MEME_LORD_THRESHOLD_USD,
        hyperactive_degen=avg_tx >= HYPERACTIVE_MIN_AVG_TX,
        diamond_hands=age >= DIAMOND_HANDS_MIN_AGE_DAYS,
        meme_coins_held=tuple(meme_symbols),
        meme_value_usd=meme_value,
        total_assets_count=len(assets),
        sol_tier=sol_tier(sol),
        days_since_last_tx=stats.days_since_last_tx,
    )
    return finalize_traits(traits)


def finalize_traits(traits: WalletTraits) -> WalletTraits:
    """Return traits with planet_tier set from their score."""
    score = calculate_score(traits)
    tier = assign_tier(score, traits.has_combo)
    logger.debug(
        "trait_aggregator_result",
        score=score,
        tier=tier.value,
        nft_count=traits.nft_count,
        token_count=traits.unique_token_count,
        markers_seeker=traits.has_seeker,
        markers_preorder=traits.has_preorder,
    )
    return replace(traits, planet_tier=tier)
