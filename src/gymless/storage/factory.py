"""Store selection from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config.settings import ConfigError
from .base import DailyRecordStore, InMemoryDailyRecordStore
from .http_store import HttpDailyRecordStore
from .json_store import JsonFileDailyRecordStore

if TYPE_CHECKING:
    from ..config.settings import Settings

__all__ = ["create_store"]


def create_store(settings: Settings) -> DailyRecordStore:
    """Create the store configured by ``settings.store_backend``.

    Raises
    ------
    ConfigError
        If the backend is unknown or lacks its required settings
    """
    backend = settings.store_backend

    if backend == "json":
        return JsonFileDailyRecordStore(settings.data_path)
    elif backend == "memory":
        return InMemoryDailyRecordStore()
    elif backend == "http":
        if not settings.api_base_url:
            raise ConfigError("GYMLESS_API_BASE_URL is required when GYMLESS_STORE_BACKEND=http")
        return HttpDailyRecordStore(
            settings.api_base_url,
            timeout=settings.api_timeout,
            api_token=settings.api_token,
        )
    else:
        raise ConfigError(f"Unknown store backend: {backend!r} (expected json, memory or http)")
