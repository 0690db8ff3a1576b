"""
On-chain addresses and lookup tables used by the classifier.

Mainnet addresses. Meme prices are static notional USD values used only to
decide the meme-lord trait, not live quotes.
"""

from __future__ import annotations

SEEKER_GENESIS_COLLECTION = "GT22s89nU4iWFkNXj1Bw6uYhJJWDRPpShHt4Bk8f99Te"
SEEKER_MINT_AUTHORITY = "GT2zuHVaZQYZSyQMgJPLzvkmyztfyXg2NJunqFp4p3A4"
PREORDER_MINT = "2DMMamkkxQ6zDMBtkFp8KH7FoWzBMBA1CGTYwom4QH6Z"
PREORDER_COLLECTION = "3uejyD3ZwHDGwT8n6KctN3Stnjn9Nih79oXES9VqA38D"

# symbol -> mint
MEME_COIN_MINTS: dict[str, str] = {
    "BONK": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    "WIF": "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",
    "POPCAT": "7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr",
    "MEW": "MEW1VNoNHn99uH86fUvYvU42o9YkS9uH9Tst6t2291",
}
MEME_COIN_PRICES_USD: dict[str, float] = {
    "BONK": 0.000002,
    "WIF": 3.5,
    "POPCAT": 0.35,
    "MEW": 0.003,
}
# mint -> symbol
MEME_MINT_LOOKUP: dict[str, str] = {mint: symbol for symbol, mint in MEME_COIN_MINTS.items()}

LST_MINTS: dict[str, str] = {
    "JITOSOL": "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn",
    "MSOL": "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So",
    "BSOL": "BSo13v7qDMGWCM1cW8wwfsfZ7vQLZKxHCiNSN2B7Mq2u",
}
LST_MINT_SET = frozenset(LST_MINTS.values())

# Lower-case substrings of protocol names
DEFI_POSITION_HINTS = ("kamino", "drift", "marginfi", "mango", "jito", "solend", "zeta")

BLUE_CHIP_COLLECTIONS = frozenset({
    "J1S9H3QjnRtBbbuD4HjPV6RpRhwuk4zKbxsnCHuTgh9w",  # Mad Lads
    "SMBH3wF6pdt967Y62N7S5mB4tJSTH3KAsdJ82D3L2nd",  # SMB Gen2
    "SMB3ndYpSXY97H8MhpxYit3pD8TzYJ5v6ndP4D2L2nd",  # SMB Gen3
    "6v9UWGmEB5Hthst9KqEAgXW6XF6R6yv4t7Yf3YfD3A7t",  # Claynosaurz
    "BUjZjAS2vbbb9p56fAun4sFmPAt8W6JURG5L3AkVvHP9",  # Famous Fox Federation
    "7TENEKwBnkpENuefriGPg4hBDR4WJ2Gyfw5AhdkMA4rq",  # Okay Bears
    "CDgbhX61QFADQAeeYKP5BQ7nnzDyMkkR3NEhYF2ETn1k",  # Taiyo Robotics
})

NFT_INTERFACE_MARKERS = ("NFT", "PROGRAMMABLE")
CUSTOM_INTERFACE = "CUSTOM"
FUNGIBLE_INTERFACES = frozenset({"FUNGIBLETOKEN", "FUNGIBLEASSET"})
DEFAULT_FUNGIBLE_DECIMALS = 9

MEME_LORD_THRESHOLD_USD = 10.0
