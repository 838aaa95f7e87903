from __future__ import annotations

from .cache import DEVICES_FILE, NOTIFICATIONS_FILE, JsonCacheStore

__all__ = ["DEVICES_FILE", "NOTIFICATIONS_FILE", "JsonCacheStore"]
