"""
Data models for ledger query results.

Upstream payloads are loosely shaped JSON with optional nesting everywhere.
Each external shape has exactly one decoding entry point (SignatureInfo.from_rpc_item,
decode_token_account, decode_asset) that navigates safely with defaults;
everything downstream works with these frozen records only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _opt_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _opt_number(value: Any) -> float | None:
    """None for missing; ValueError for anything present that is not a finite number."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"boolean is not a number: {value!r}")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"non-finite number: {value!r}")
    return number


@dataclass(frozen=True)
class SignatureInfo:
    """
    One getSignaturesForAddress result item.

    Mirrors Solana RPC response fields; only block_time feeds the traits.
    """

    signature: str
    slot: int
    err: Any  # None if success; dict/object from RPC if failed
    block_time: int | None  # Unix timestamp; None if not available
    memo: str | None
    confirmation_status: str | None  # processed | confirmed | finalized

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """Build from a single getSignaturesForAddress result item."""
        block_time = item.get("blockTime")
        return cls(
            signature=item["signature"],
            slot=int(item["slot"]),
            err=item.get("err"),
            block_time=int(block_time) if block_time is not None else None,
            memo=item.get("memo"),
            confirmation_status=item.get("confirmationStatus"),
        )


@dataclass(frozen=True)
class TokenAccount:
    """Parsed SPL token account (getTokenAccountsByOwner, jsonParsed)."""

    mint: str
    ui_amount: float
    decimals: int


def decode_token_account(raw: Any) -> TokenAccount | None:
    """
    Decode one getTokenAccountsByOwner value entry.

    Returns None when the entry has no mint or an unparseable amount.
    A null uiAmount falls back to uiAmountString, then 0.
    """
    parsed = _as_dict(_as_dict(_as_dict(_as_dict(raw).get("account")).get("data")).get("parsed"))
    info = _as_dict(parsed.get("info"))
    mint = _opt_str(info.get("mint"))
    if mint is None:
        return None
    amount = _as_dict(info.get("tokenAmount"))
    try:
        ui_amount = _opt_number(amount.get("uiAmount"))
        if ui_amount is None:
            ui_amount = _opt_number(amount.get("uiAmountString")) or 0.0
        decimals = int(_opt_number(amount.get("decimals")) or 0)
    except (TypeError, ValueError):
        return None
    return TokenAccount(mint=mint, ui_amount=ui_amount, decimals=decimals)


@dataclass(frozen=True)
class Grouping:
    group_key: str
    group_value: str


@dataclass(frozen=True)
class TokenInfo:
    """token_info block of an indexed asset; every field optional upstream."""

    decimals: int | None = None
    supply: float | None = None
    balance: float | None = None
    amount: float | None = None


@dataclass(frozen=True)
class AssetRecord:
    """
    One item of the indexed getAssetsByOwner result.

    token_info is None either because the asset has none or because it could
    not be parsed; token_info_malformed tells the two apart.
    """

    id: str
    name: str | None = None
    symbol: str | None = None
    image: str | None = None
    interface: str | None = None
    groupings: tuple[Grouping, ...] = ()
    authorities: tuple[str, ...] = ()
    creators: tuple[str, ...] = ()
    token_info: TokenInfo | None = None
    compressed: bool = False
    token_info_malformed: bool = False

    @property
    def collection(self) -> str | None:
        """group_value of the first grouping keyed "collection"."""
        for grouping in self.groupings:
            if grouping.group_key == "collection":
                return grouping.group_value
        return None


def _decode_token_info(raw: Any) -> tuple[TokenInfo | None, bool]:
    if raw is None:
        return None, False
    if not isinstance(raw, dict):
        return None, True
    try:
        decimals = _opt_number(raw.get("decimals"))
        info = TokenInfo(
            decimals=int(decimals) if decimals is not None else None,
            supply=_opt_number(raw.get("supply")),
            balance=_opt_number(raw.get("balance")),
            amount=_opt_number(raw.get("amount")),
        )
    except (TypeError, ValueError):
        return None, True
    return info, False


def _addresses(items: Any) -> tuple[str, ...]:
    out = []
    for item in _as_list(items):
        address = _opt_str(_as_dict(item).get("address"))
        if address:
            out.append(address)
    return tuple(out)


def decode_asset(raw: Any) -> AssetRecord | None:
    """
    Decode one getAssetsByOwner item. Returns None when the item has no id.

    Never raises on odd nesting: missing or wrongly typed blocks read as absent.
    """
    data = _as_dict(raw)
    asset_id = _opt_str(data.get("id"))
    if asset_id is None:
        return None
    content = _as_dict(data.get("content"))
    metadata = _as_dict(content.get("metadata"))
    links = _as_dict(content.get("links"))
    groupings = []
    for item in _as_list(data.get("grouping")):
        group = _as_dict(item)
        key = _opt_str(group.get("group_key"))
        value = _opt_str(group.get("group_value"))
        if key and value:
            groupings.append(Grouping(group_key=key, group_value=value))
    token_info, malformed = _decode_token_info(data.get("token_info"))
    return AssetRecord(
        id=asset_id,
        name=_opt_str(metadata.get("name")),
        symbol=_opt_str(metadata.get("symbol")),
        image=_opt_str(links.get("image")),
        interface=_opt_str(data.get("interface")),
        groupings=tuple(groupings),
        authorities=_addresses(data.get("authorities")),
        creators=_addresses(data.get("creators")),
        token_info=token_info,
        compressed=_as_dict(data.get("compression")).get("compressed") is True,
        token_info_malformed=malformed,
    )


@dataclass(frozen=True)
class AccountData:
    """Result of the combined balance / signatures / token accounts query."""

    balance_lamports: int
    signatures: tuple[SignatureInfo, ...]
    token_accounts: tuple[TokenAccount, ...]
