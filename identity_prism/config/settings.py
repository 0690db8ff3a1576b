"""
Application settings.

Settings is an immutable snapshot of the environment taken by get_settings().
Components receive a Settings instance instead of reading os.environ, so
tests can build one directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from identity_prism.config import env


@dataclass(frozen=True)
class Settings:
    helius_api_keys: tuple[str, ...] = ()
    helius_proxy_url: str | None = None
    helius_rpc_base: str = env.HELIUS_MAINNET_RPC_BASE
    metadata_base_url: str | None = None
    metadata_image_url: str | None = None
    app_base_url: str | None = None
    request_timeout_sec: float = env.DEFAULT_REQUEST_TIMEOUT_SEC
    mint_request_ttl_sec: float = env.DEFAULT_MINT_REQUEST_TTL_SEC
    network: str = field(default="mainnet-beta")

    @property
    def has_ledger_access(self) -> bool:
        """True when either a proxy or at least one API key is configured."""
        return bool(self.helius_proxy_url or self.helius_api_keys)


def get_settings() -> Settings:
    """
    Build Settings from the current environment (.env loaded first).

    Raises:
        ValueError: a numeric setting is not a positive number.
    """
    return Settings(
        helius_api_keys=tuple(env.get_helius_api_keys()),
        helius_proxy_url=env.get_helius_proxy_url(),
        helius_rpc_base=env.get_helius_rpc_base(),
        metadata_base_url=env.get_metadata_base_url(),
        metadata_image_url=env.get_metadata_image_url(),
        app_base_url=env.get_app_base_url(),
        request_timeout_sec=env.get_request_timeout_sec(),
        mint_request_ttl_sec=env.get_mint_request_ttl_sec(),
    )
