"""HTTP API for pool quotes and swap calldata."""

from launchpool.api.main import app, run

__all__ = ["app", "run"]
