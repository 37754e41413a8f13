"""Storage layer for daily records (injected stores, no global state)."""

from .base import DailyRecordStore, InMemoryDailyRecordStore, StoreError
from .factory import create_store
from .http_store import HttpDailyRecordStore
from .json_store import JsonFileDailyRecordStore

__all__ = [
    "DailyRecordStore",
    "HttpDailyRecordStore",
    "InMemoryDailyRecordStore",
    "JsonFileDailyRecordStore",
    "StoreError",
    "create_store",
]
