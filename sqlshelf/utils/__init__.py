"""
Utilities package for sqlshelf.

Exports shared helpers for logging and profiling. Keep this package free of
engine and storage logic.
"""

from sqlshelf.utils.logging import configure_logging, get_logger
from sqlshelf.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
