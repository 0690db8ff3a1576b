"""
Scoring engine: WalletTraits -> integer score (0-1400) -> planet tier.

Pure functions, no I/O. Score is the sum of four banded factors (SOL
balance, wallet age, tx count, NFT count) and flat trait bonuses, rounded
half-up and clamped to [SCORE_MIN, MAX_SCORE]. Tier is a step function of
the score, except that the combo trait always maps to binary_sun.
"""

from __future__ import annotations

import math

from identity_prism.analytics.models import TierLabel, WalletTraits
from identity_prism.prism_logging import get_logger

logger = get_logger(__name__)

SCORE_MIN = 0
MAX_SCORE = 1400

# (inclusive lower bound, points), highest first
SOL_BALANCE_BANDS = ((10.0, 100), (5.0, 85), (1.0, 60), (0.5, 40), (0.1, 20))
# (exclusive lower bound, points), highest first
WALLET_AGE_BANDS = ((730, 250), (365, 180), (180, 120), (90, 70), (30, 35), (7, 15))
TX_COUNT_BANDS = ((5000, 200), (2000, 160), (1000, 120), (500, 80), (100, 50), (50, 30))
NFT_COUNT_BANDS = ((100, 80), (50, 60), (20, 40), (5, 20))

TX_LOW_MULTIPLIER = 0.5
TX_LOW_CAP = 25

SEEKER_BONUS = 200
PREORDER_BONUS = 150
COMBO_BONUS = 200
BLUE_CHIP_BONUS = 50
DEFI_KING_BONUS = 30
DIAMOND_HANDS_BONUS = 50
HYPERACTIVE_BONUS = 50
MEME_LORD_BONUS = 30

# (inclusive lower bound, tier), highest first
TIER_THRESHOLDS = (
    (1051, TierLabel.SUN),
    (951, TierLabel.JUPITER),
    (851, TierLabel.SATURN),
    (701, TierLabel.URANUS),
    (551, TierLabel.NEPTUNE),
    (401, TierLabel.EARTH),
    (251, TierLabel.VENUS),
    (101, TierLabel.MARS),
)


def _band_at_least(value: float, bands: tuple[tuple[float, int], ...]) -> int:
    for bound, points in bands:
        if value >= bound:
            return points
    return 0


def _band_above(value: float, bands: tuple[tuple[float, int], ...]) -> int:
    for bound, points in bands:
        if value > bound:
            return points
    return 0


def sol_points(sol_balance: float) -> int:
    return _band_at_least(sol_balance, SOL_BALANCE_BANDS)


def age_points(wallet_age_days: int) -> int:
    return _band_above(wallet_age_days, WALLET_AGE_BANDS)


def tx_points(tx_count: int) -> float:
    """Banded above 50 transactions; below that 0.5 per tx, at most 25."""
    points = _band_above(tx_count, TX_COUNT_BANDS)
    if points:
        return points
    return min(max(tx_count, 0) * TX_LOW_MULTIPLIER, TX_LOW_CAP)


def nft_points(nft_count: int) -> int:
    return _band_above(nft_count, NFT_COUNT_BANDS)


def score_breakdown(traits: WalletTraits) -> dict[str, float]:
    """Points per factor before rounding and clamping."""
    return {
        "sol": sol_points(traits.sol_balance),
        "age": age_points(traits.wallet_age_days),
        "tx": tx_points(traits.tx_count),
        "nft": nft_points(traits.nft_count),
        "seeker": SEEKER_BONUS if traits.has_seeker else 0,
        "preorder": PREORDER_BONUS if traits.has_preorder else 0,
        "combo": COMBO_BONUS if traits.has_combo else 0,
        "blue_chip": BLUE_CHIP_BONUS if traits.is_blue_chip else 0,
        "defi_king": DEFI_KING_BONUS if traits.is_defi_king else 0,
        "diamond_hands": DIAMOND_HANDS_BONUS if traits.diamond_hands else 0,
        "hyperactive": HYPERACTIVE_BONUS if traits.hyperactive_degen else 0,
        "meme_lord": MEME_LORD_BONUS if traits.is_meme_lord else 0,
    }


def clamp_score(raw: float) -> int:
    """Round half-up, then clamp to [SCORE_MIN, MAX_SCORE]."""
    rounded = math.floor(raw + 0.5)
    return max(SCORE_MIN, min(MAX_SCORE, rounded))


def calculate_score(traits: WalletTraits) -> int:
    """Identity score in [0, 1400]."""
    breakdown = score_breakdown(traits)
    score = clamp_score(sum(breakdown.values()))
    logger.debug("scoring_engine_result", score=score, breakdown=breakdown)
    return score


def assign_tier(score: int, has_combo: bool) -> TierLabel:
    """Combo holders are always binary_sun; otherwise the first threshold the score reaches."""
    if has_combo:
        return TierLabel.BINARY_SUN
    for threshold, tier in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return TierLabel.MERCURY


def badges(traits: WalletTraits) -> list[str]:
    """Short badge keys for display and mint metadata, in a fixed order."""
    checks = (
        ("og", traits.is_og),
        ("whale", traits.is_whale),
        ("collector", traits.is_collector),
        ("binary", traits.has_combo),
        ("early", traits.is_early_adopter),
        ("titan", traits.is_tx_titan),
        ("maxi", traits.is_solana_maxi),
        ("seeker", traits.has_seeker),
        ("visionary", traits.has_preorder),
        ("diamond_hands", traits.diamond_hands),
        ("degen", traits.hyperactive_degen),
        ("meme_lord", traits.is_meme_lord),
        ("defi_king", traits.is_defi_king),
    )
    return [name for name, earned in checks if earned]
