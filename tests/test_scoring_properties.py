"""
Property-based tests for scoring and aggregation using Hypothesis.

Clamp, tier monotonicity, combo implication and the classifier partition.
"""

from __future__ import annotations

from hypothesis import example, given, strategies as st

from identity_prism.analytics.models import TierLabel, WalletTraits
from identity_prism.analytics.scoring_engine import MAX_SCORE, assign_tier, calculate_score
from identity_prism.analytics.trait_aggregator import AccountStats, aggregate_traits
from identity_prism.ledger.models import AssetRecord, Grouping, TokenAccount, TokenInfo

PREORDER_MINT = "2DMMamkkxQ6zDMBtkFp8KH7FoWzBMBA1CGTYwom4QH6Z"
SEEKER_COLLECTION = "GT22s89nU4iWFkNXj1Bw6uYhJJWDRPpShHt4Bk8f99Te"

traits_strategy = st.builds(
    WalletTraits,
    sol_balance=st.floats(min_value=-1.0, max_value=1e9, allow_nan=False, allow_infinity=False),
    wallet_age_days=st.integers(min_value=0, max_value=100_000),
    tx_count=st.integers(min_value=0, max_value=1_000_000),
    nft_count=st.integers(min_value=0, max_value=1_000_000),
    unique_token_count=st.integers(min_value=0, max_value=1_000_000),
    has_seeker=st.booleans(),
    has_preorder=st.booleans(),
    has_combo=st.booleans(),
    is_blue_chip=st.booleans(),
    is_defi_king=st.booleans(),
    is_meme_lord=st.booleans(),
    hyperactive_degen=st.booleans(),
    diamond_hands=st.booleans(),
)

asset_ids = st.sampled_from(
    [f"asset{i}" for i in range(12)] + [PREORDER_MINT, "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn"]
)

asset_strategy = st.builds(
    AssetRecord,
    id=asset_ids,
    name=st.one_of(st.none(), st.sampled_from(["Seeker Genesis", "Chapter 2 Preorder", "Kamino LP", "Mad Lad #1", "x"])),
    interface=st.one_of(st.none(), st.sampled_from(["V1_NFT", "ProgrammableNFT", "FungibleToken", "FungibleAsset", "Custom", "V1_PRINT"])),
    groupings=st.one_of(st.just(()), st.just((Grouping("collection", SEEKER_COLLECTION),))),
    token_info=st.one_of(
        st.none(),
        st.builds(
            TokenInfo,
            decimals=st.one_of(st.none(), st.integers(min_value=0, max_value=12)),
            supply=st.one_of(st.none(), st.floats(min_value=0, max_value=1e12, allow_nan=False)),
            balance=st.one_of(st.none(), st.floats(min_value=0, max_value=1e12, allow_nan=False)),
        ),
    ),
    compressed=st.booleans(),
    token_info_malformed=st.booleans(),
)

account_strategy = st.builds(
    TokenAccount,
    mint=asset_ids,
    ui_amount=st.floats(min_value=0, max_value=1e9, allow_nan=False),
    decimals=st.integers(min_value=0, max_value=9),
)


@given(traits=traits_strategy)
def test_score_always_within_bounds(traits):
    score = calculate_score(traits)
    assert 0 <= score <= MAX_SCORE


@given(low=st.integers(min_value=0, max_value=MAX_SCORE), high=st.integers(min_value=0, max_value=MAX_SCORE))
@example(low=100, high=101)
@example(low=1050, high=1051)
def test_tier_is_monotonic_without_combo(low, high):
    if low > high:
        low, high = high, low
    assert assign_tier(low, has_combo=False).rank <= assign_tier(high, has_combo=False).rank
    assert assign_tier(high, has_combo=False) != TierLabel.BINARY_SUN


@given(assets=st.lists(asset_strategy, max_size=20), accounts=st.lists(account_strategy, max_size=20))
def test_partition_counts_every_asset_once(assets, accounts):
    """Indexed assets count once each; fallback adds one per unseen positive-balance mint."""
    stats = AccountStats(sol_balance=1.0, wallet_age_days=100, tx_count=50)
    traits = aggregate_traits(stats, assets, accounts)
    indexed = {a.id for a in assets}
    unseen = {acct.mint for acct in accounts if acct.ui_amount > 0 and acct.mint not in indexed}
    assert traits.unique_token_count + traits.nft_count == len(assets) + len(unseen)
    assert traits.total_assets_count == len(assets)


@given(assets=st.lists(asset_strategy, max_size=20), accounts=st.lists(account_strategy, max_size=10))
def test_combo_implies_seeker_and_preorder(assets, accounts):
    stats = AccountStats(sol_balance=0.0, wallet_age_days=0, tx_count=0)
    traits = aggregate_traits(stats, assets, accounts)
    if traits.has_combo:
        assert traits.has_seeker and traits.has_preorder
        assert traits.planet_tier == TierLabel.BINARY_SUN
    else:
        assert traits.planet_tier != TierLabel.BINARY_SUN
