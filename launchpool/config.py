"""Runtime configuration and logging setup.

Settings come from environment variables, read once at import time:
- LAUNCHPOOL_HOST: Host to bind to (default: 0.0.0.0)
- LAUNCHPOOL_PORT: Port to bind to (default: 8000)
- LAUNCHPOOL_DEBUG: Enable reload mode (default: false)
- LAUNCHPOOL_RPC_URL: JSON-RPC endpoint for pool state (default: unset, in-memory pools)
- LAUNCHPOOL_RPC_TIMEOUT: RPC timeout in seconds (default: 10)
- LAUNCHPOOL_LOG_LEVEL: Log level name (default: INFO)
"""

import logging
import os

import structlog

HOST = os.environ.get("LAUNCHPOOL_HOST", "0.0.0.0")
PORT = int(os.environ.get("LAUNCHPOOL_PORT", "8000"))
DEBUG = os.environ.get("LAUNCHPOOL_DEBUG", "false").lower() in ("true", "1", "yes")
RPC_URL = os.environ.get("LAUNCHPOOL_RPC_URL") or None
RPC_TIMEOUT = float(os.environ.get("LAUNCHPOOL_RPC_TIMEOUT", "10"))
LOG_LEVEL = os.environ.get("LAUNCHPOOL_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Route structlog through a level filter with timestamps and console output."""
    log_level = logging.getLevelName(level)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
