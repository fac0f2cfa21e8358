"""Storage backends for projects and analysis rows."""

from .base import MARKET_INSIGHTS, PAGES, TEST_RESULTS, StorageBackend
from .json_store import JsonStorage
from .memory import MemoryStorage

__all__ = ["StorageBackend", "MemoryStorage", "JsonStorage", "PAGES", "TEST_RESULTS", "MARKET_INSIGHTS"]
