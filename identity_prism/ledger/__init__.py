"""
Ledger query client: JSON-RPC reads against Helius (direct or through the proxy).

Balance, paginated signatures, parsed token accounts and the indexed
assets-by-owner query, each run with try-next-endpoint fallback.
"""

from identity_prism.ledger.client import LedgerClient, validate_address
from identity_prism.ledger.endpoints import Endpoint, build_endpoints, rotate_endpoints, seed_index
from identity_prism.ledger.models import AccountData, AssetRecord, SignatureInfo, TokenAccount

__all__ = [
    "AccountData",
    "AssetRecord",
    "Endpoint",
    "LedgerClient",
    "SignatureInfo",
    "TokenAccount",
    "build_endpoints",
    "rotate_endpoints",
    "seed_index",
    "validate_address",
]
