"""Utility modules for hlserve.

Provides:
- logger: get_logger and configure_logging
"""

from hlserve.utils.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
