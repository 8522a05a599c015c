"""
Engine package for sqlshelf.

Re-exports the binding interfaces and the SQLite implementation so callers can
import from ``sqlshelf.engine`` directly.
"""

from sqlshelf.engine.abstract import AbstractEngineBinding, EngineBinding, HandleState
from sqlshelf.engine.sqlite import SQLiteEngineHandle

__all__ = [
    "AbstractEngineBinding",
    "EngineBinding",
    "HandleState",
    "SQLiteEngineHandle",
]
