"""
Mint metadata documents.

build_mint_metadata() is the internal record handed to the mint step;
build_metadata_json() is the public NFT metadata JSON uploaded to storage.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from identity_prism.analytics.models import WalletSnapshot, WalletTraits
from identity_prism.mint.mint_requests import mint_trait_subset

COLLECTION_NAME = "Identity Prism"
COLLECTION_SYMBOL = "PRISM"
DEFAULT_NETWORK = "mainnet-beta"
DESCRIPTION = "Identity Prism: a living Solana identity card built from your on-chain footprint."
IMAGE_MIME_TYPE = "image/png"
DAYS_PER_YEAR = 365


def short_address(address: str) -> str:
    """abcd...wxyz"""
    return f"{address[:4]}...{address[-4:]}"


def _ready_traits(snapshot: WalletSnapshot) -> WalletTraits:
    if snapshot.traits is None or not snapshot.ok:
        raise ValueError("metadata requires a ready snapshot")
    return snapshot.traits


def _timestamp(now: float | None) -> str:
    moment = datetime.now(timezone.utc) if now is None else datetime.fromtimestamp(now, timezone.utc)
    return moment.isoformat()


def build_mint_metadata(
    snapshot: WalletSnapshot,
    *,
    network: str = DEFAULT_NETWORK,
    now: float | None = None,
) -> dict[str, Any]:
    traits = _ready_traits(snapshot)
    return {
        "collection": COLLECTION_NAME,
        "network": network,
        "score": snapshot.score,
        "planetTier": snapshot.tier.value,
        "traits": mint_trait_subset(traits),
        "stats": {
            "tokens": traits.unique_token_count,
            "nfts": traits.nft_count,
            "transactions": traits.tx_count,
            "solBalance": traits.sol_balance,
            "walletAgeYears": traits.wallet_age_days // DAYS_PER_YEAR,
        },
        "timestamp": _timestamp(now),
        "address": snapshot.address,
    }


def build_metadata_json(
    snapshot: WalletSnapshot,
    *,
    image_url: str,
    app_base_url: str | None = None,
) -> dict[str, Any]:
    """Public NFT metadata (name, image, attributes, files)."""
    traits = _ready_traits(snapshot)
    document: dict[str, Any] = {
        "name": f"{COLLECTION_NAME} #{short_address(snapshot.address)}",
        "symbol": COLLECTION_SYMBOL,
        "description": DESCRIPTION,
        "image": image_url,
        "attributes": [
            {"trait_type": "Tier", "value": snapshot.tier.value},
            {"trait_type": "Score", "value": snapshot.score},
            {"trait_type": "NFTs", "value": traits.nft_count},
            {"trait_type": "Tokens", "value": traits.unique_token_count},
            {"trait_type": "Transactions", "value": traits.tx_count},
            {"trait_type": "Wallet Age (days)", "value": traits.wallet_age_days},
        ],
        "properties": {
            "files": [{"uri": image_url, "type": IMAGE_MIME_TYPE}],
            "category": "image",
        },
    }
    if app_base_url:
        link = f"{app_base_url.rstrip('/')}/?address={snapshot.address}"
        document["external_url"] = link
        document["animation_url"] = link
    return document
