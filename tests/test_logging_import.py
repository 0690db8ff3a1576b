"""
Test that prism_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from prism_logging and use the logger."""
    from identity_prism.prism_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_short_wallet_truncates_long_addresses():
    from identity_prism.prism_logging import short_wallet

    assert short_wallet("So11111111111111111111111111111111111111112") == "So11111111111111..."
    assert short_wallet("abc") == "abc"


def test_bind_wallet_returns_logger():
    from identity_prism.prism_logging import bind_wallet

    logger = bind_wallet("So11111111111111111111111111111111111111112")
    logger.info("bound_message")
