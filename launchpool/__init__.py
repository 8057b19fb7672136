"""Launchpool: weighted pool pricing for a memecoin launchpad."""

__version__ = "0.1.0"
