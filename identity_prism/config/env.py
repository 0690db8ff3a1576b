"""
Environment variable loading for Identity Prism.

- HELIUS_API_KEYS: comma-separated Helius API keys (HELIUS_API_KEY accepted for one key)
- HELIUS_PROXY_URL: forwarding proxy; when set, RPC goes to {proxy}/rpc with an x-wallet-address header
- HELIUS_RPC_BASE: direct RPC base URL (default mainnet)
- METADATA_BASE_URL / METADATA_IMAGE_URL / APP_BASE_URL: metadata storage and links
- PRISM_REQUEST_TIMEOUT_SEC, PRISM_MINT_REQUEST_TTL_SEC
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is identity_prism/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

HELIUS_MAINNET_RPC_BASE = "https://mainnet.helius-rpc.com/"
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
DEFAULT_MINT_REQUEST_TTL_SEC = 600.0
DEFAULT_IMAGE_NAME = "identity-prism.png"


def load_prism_env() -> None:
    """Load .env from project root. Safe to call multiple times; real env wins."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def _get(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _get_float(name: str, default: float) -> float:
    raw = _get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def get_helius_api_keys() -> list[str]:
    """
    Return configured Helius API keys, in configuration order.
    Order: HELIUS_API_KEYS (comma list) > HELIUS_API_KEY. Duplicates dropped.
    """
    load_prism_env()
    raw = _get("HELIUS_API_KEYS") or _get("HELIUS_API_KEY")
    keys: list[str] = []
    for part in raw.split(","):
        key = part.strip()
        if key and key not in keys:
            keys.append(key)
    return keys


def get_helius_proxy_url() -> str | None:
    """Return HELIUS_PROXY_URL without trailing slashes, or None."""
    load_prism_env()
    url = _get("HELIUS_PROXY_URL").rstrip("/")
    return url or None


def get_helius_rpc_base() -> str:
    load_prism_env()
    return _get("HELIUS_RPC_BASE") or HELIUS_MAINNET_RPC_BASE


def get_metadata_base_url() -> str | None:
    """Return METADATA_BASE_URL without trailing slashes, or None."""
    load_prism_env()
    url = _get("METADATA_BASE_URL").rstrip("/")
    return url or None


def get_metadata_image_url() -> str | None:
    """METADATA_IMAGE_URL, else the default image under METADATA_BASE_URL/assets."""
    load_prism_env()
    url = _get("METADATA_IMAGE_URL")
    if url:
        return url
    base = get_metadata_base_url()
    return f"{base}/assets/{DEFAULT_IMAGE_NAME}" if base else None


def get_app_base_url() -> str | None:
    load_prism_env()
    url = _get("APP_BASE_URL").rstrip("/")
    return url or None


def get_request_timeout_sec() -> float:
    load_prism_env()
    return _get_float("PRISM_REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC)


def get_mint_request_ttl_sec() -> float:
    load_prism_env()
    return _get_float("PRISM_MINT_REQUEST_TTL_SEC", DEFAULT_MINT_REQUEST_TTL_SEC)
