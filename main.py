"""
Main entrypoint: serve the Identity Prism API with uvicorn.

Env: HELIUS_API_KEYS or HELIUS_PROXY_URL, METADATA_BASE_URL, API_HOST, API_PORT, LOG_LEVEL.

Equivalent: uvicorn identity_prism.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from identity_prism.prism_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    api_host = os.getenv("API_HOST", "0.0.0.0").strip()
    api_port = int(os.getenv("API_PORT", "8000").strip() or "8000")

    from identity_prism.api_server.app import app
    from identity_prism.config import get_settings
    import uvicorn

    settings = get_settings()
    if not settings.has_ledger_access:
        logger.warning(
            "main_config_warning",
            message="No HELIUS_API_KEYS / HELIUS_PROXY_URL set; identity lookups will fail",
        )

    logger.info("main_server_starting", host=api_host, port=api_port)
    uvicorn.run(app, host=api_host, port=api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
