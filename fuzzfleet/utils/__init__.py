"""Utility modules for logging."""

from fuzzfleet.utils.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
