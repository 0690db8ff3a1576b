"""Configuration: environment variables (.env) and the typed Settings object."""

from identity_prism.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
