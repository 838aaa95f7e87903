"""pingwatch - keep a device list in sync, probe it, and notify on up/down changes."""

from __future__ import annotations

from importlib.metadata import version

from .config import AppConfig, ConfigProvider, Settings, get_settings
from .core import (
    DeviceRegistry,
    Engine,
    LivenessTracker,
    NotificationSink,
    ProbeScheduler,
)
from .models import Device, Direction, Notification, Severity, TransitionEvent
from .storage import JsonCacheStore

__all__ = [
    "AppConfig",
    "ConfigProvider",
    "Device",
    "DeviceRegistry",
    "Direction",
    "Engine",
    "JsonCacheStore",
    "LivenessTracker",
    "Notification",
    "NotificationSink",
    "ProbeScheduler",
    "Settings",
    "Severity",
    "TransitionEvent",
    "__version__",
    "get_settings",
]

__version__ = version("pingwatch")
