"""
Structured logging for Identity Prism.

JSON logs with timestamp, level, logger name and event_type.
Use get_logger() in every module for aggregation-friendly output.
"""

from identity_prism.prism_logging.logger import bind_wallet, get_logger, short_wallet

__all__ = ["bind_wallet", "get_logger", "short_wallet"]
