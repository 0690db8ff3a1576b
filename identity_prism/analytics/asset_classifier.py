"""
Asset classifier: NFT vs fungible, plus marker detection.

Classification order (first match wins):
1. Explicit NFT / programmable / custom interface, or compressed -> NFT.
2. decimals == 0 with a name, image or collection grouping, and not known
   fungible -> NFT.
3. Fungible interface, or supply > 1 with decimals > 0 -> fungible.
4. Anything else -> fungible.

Markers are independent of the kind and of each other. A malformed asset is
classified fungible and never raises; one bad record must not abort a scan.

scan_token_accounts() is the second pass over plain token accounts, which
catches holdings the asset index has not picked up yet.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Collection, Iterable

from identity_prism.analytics.constants import (
    BLUE_CHIP_COLLECTIONS,
    CUSTOM_INTERFACE,
    DEFAULT_FUNGIBLE_DECIMALS,
    DEFI_POSITION_HINTS,
    FUNGIBLE_INTERFACES,
    LST_MINT_SET,
    MEME_COIN_PRICES_USD,
    MEME_MINT_LOOKUP,
    NFT_INTERFACE_MARKERS,
    PREORDER_COLLECTION,
    PREORDER_MINT,
    SEEKER_GENESIS_COLLECTION,
    SEEKER_MINT_AUTHORITY,
)
from identity_prism.ledger.models import AssetRecord, TokenAccount
from identity_prism.prism_logging import get_logger

logger = get_logger(__name__)


class AssetKind(str, Enum):
    NFT = "nft"
    FUNGIBLE = "fungible"


class Marker(str, Enum):
    SEEKER = "seeker"
    PREORDER = "preorder"
    BLUE_CHIP = "blue_chip"
    DEFI = "defi"
    LIQUID_STAKING = "liquid_staking"
    MEME = "meme"


@dataclass(frozen=True)
class AssetClassification:
    kind: AssetKind
    markers: frozenset[Marker] = frozenset()
    meme_symbol: str | None = None  # set only when a positive meme balance is held
    meme_value_usd: float = 0.0


@dataclass(frozen=True)
class FallbackScan:
    """What the token-account pass adds on top of the indexed assets."""

    has_preorder: bool = False
    has_liquid_staking: bool = False
    extra_nft_count: int = 0
    extra_token_count: int = 0
    meme_symbols: tuple[str, ...] = ()
    meme_value_usd: float = 0.0


def _interface(asset: AssetRecord) -> str:
    return (asset.interface or "").upper()


def _is_fungible_looking(asset: AssetRecord) -> bool:
    """Used only to pick a default when decimals are missing."""
    if _interface(asset) in FUNGIBLE_INTERFACES:
        return True
    info = asset.token_info
    if info is None:
        return False
    return (info.decimals or 0) > 0 or (info.supply or 0) > 1


def resolve_decimals(asset: AssetRecord) -> int:
    info = asset.token_info
    if info is not None and info.decimals is not None:
        return info.decimals
    return DEFAULT_FUNGIBLE_DECIMALS if _is_fungible_looking(asset) else 0


def classify_kind(asset: AssetRecord) -> AssetKind:
    """NFT vs fungible, by the ordered rules in the module docstring."""
    if asset.token_info_malformed:
        return AssetKind.FUNGIBLE
    iface = _interface(asset)
    if any(marker in iface for marker in NFT_INTERFACE_MARKERS) or iface == CUSTOM_INTERFACE:
        return AssetKind.NFT
    if asset.compressed:
        return AssetKind.NFT

    decimals = resolve_decimals(asset)
    supply = asset.token_info.supply if asset.token_info is not None else None
    known_fungible = iface in FUNGIBLE_INTERFACES or ((supply or 0) > 1 and decimals > 0)
    has_identity = bool(asset.name or asset.image or asset.groupings)
    if decimals == 0 and has_identity and not known_fungible:
        return AssetKind.NFT
    return AssetKind.FUNGIBLE


def _match_name(asset: AssetRecord) -> str:
    # Assets without metadata are matched on their id
    return asset.name or asset.id


def is_seeker(asset: AssetRecord) -> bool:
    name = _match_name(asset).lower()
    symbol = (asset.symbol or "").lower()
    named = (
        ("seeker" in name or "seeker" in symbol)
        and "preorder" not in name
        and "chapter 2" not in name
    )
    return (
        named
        or asset.collection == SEEKER_GENESIS_COLLECTION
        or SEEKER_MINT_AUTHORITY in asset.authorities
        or SEEKER_MINT_AUTHORITY in asset.creators
        or ("seeker" in name and ("genesis" in name or "citizen" in name))
    )


def is_preorder(asset: AssetRecord) -> bool:
    raw_name = _match_name(asset)
    return (
        asset.id == PREORDER_MINT
        or "Chapter 2" in raw_name
        or "Seeker Preorder" in raw_name
        or any(g.group_value == PREORDER_COLLECTION for g in asset.groupings)
    )


def has_defi_hint(name: str) -> bool:
    lowered = name.lower()
    return any(hint in lowered for hint in DEFI_POSITION_HINTS)


def meme_holding(asset: AssetRecord) -> tuple[str, float] | None:
    """(symbol, usd value) for a positive meme-coin balance, else None."""
    symbol = MEME_MINT_LOOKUP.get(asset.id)
    info = asset.token_info
    if symbol is None or info is None:
        return None
    raw = info.balance if info.balance is not None else (info.amount or 0.0)
    decimals = resolve_decimals(asset)
    quantity = raw / (10 ** decimals) if decimals > 0 else raw
    if quantity <= 0:
        return None
    return symbol, quantity * MEME_COIN_PRICES_USD.get(symbol, 0.0)


def _classify(asset: AssetRecord) -> AssetClassification:
    kind = classify_kind(asset)
    markers: set[Marker] = set()
    if is_seeker(asset):
        markers.add(Marker.SEEKER)
    if is_preorder(asset):
        markers.add(Marker.PREORDER)
    if kind is AssetKind.NFT and asset.collection in BLUE_CHIP_COLLECTIONS:
        markers.add(Marker.BLUE_CHIP)
    if has_defi_hint(_match_name(asset)):
        markers.add(Marker.DEFI)
    if asset.id in LST_MINT_SET:
        markers.add(Marker.LIQUID_STAKING)

    meme_symbol = None
    meme_value = 0.0
    if asset.id in MEME_MINT_LOOKUP:
        markers.add(Marker.MEME)
        holding = meme_holding(asset)
        if holding is not None:
            meme_symbol, meme_value = holding
    return AssetClassification(
        kind=kind,
        markers=frozenset(markers),
        meme_symbol=meme_symbol,
        meme_value_usd=meme_value,
    )


def classify_asset(asset: AssetRecord) -> AssetClassification:
    """Classify one asset; any anomaly yields a plain fungible classification."""
    try:
        return _classify(asset)
    except (TypeError, ValueError, ArithmeticError) as e:
        logger.warning("classifier_asset_fallback", asset_id=asset.id, error=str(e))
        return AssetClassification(kind=AssetKind.FUNGIBLE)


def scan_token_accounts(
    accounts: Iterable[TokenAccount],
    indexed_ids: Collection[str],
) -> FallbackScan:
    """
    Second pass over token accounts with a positive balance.

    Preorder and LST mints are re-checked on every account. Mints already in
    the indexed set are not counted again and their meme value is not added
    twice. Unseen mints count once each: decimals 0 as an NFT, otherwise as
    a token.
    """
    has_preorder = False
    has_lst = False
    nft_count = 0
    token_count = 0
    meme_symbols: list[str] = []
    meme_value = 0.0
    counted: set[str] = set()

    for account in accounts:
        if account.ui_amount <= 0:
            continue
        mint = account.mint
        if mint == PREORDER_MINT:
            has_preorder = True
        if mint in LST_MINT_SET:
            has_lst = True
        if mint in indexed_ids:
            continue
        symbol = MEME_MINT_LOOKUP.get(mint)
        if symbol is not None:
            if symbol not in meme_symbols:
                meme_symbols.append(symbol)
            meme_value += account.ui_amount * MEME_COIN_PRICES_USD.get(symbol, 0.0)
        if mint in counted:
            continue
        counted.add(mint)
        if account.decimals == 0:
            nft_count += 1
        else:
            token_count += 1

    return FallbackScan(
        has_preorder=has_preorder,
        has_liquid_staking=has_lst,
        extra_nft_count=nft_count,
        extra_token_count=token_count,
        meme_symbols=tuple(meme_symbols),
        meme_value_usd=meme_value,
    )
