from __future__ import annotations

from .directory import HttpDirectory
from .engine import Engine
from .interfaces import CacheStore, Prober, RemoteDirectory
from .liveness import LivenessTracker
from .notifications import NotificationSink, transition_message
from .prober import PingProber
from .registry import DeviceRegistry
from .scheduler import ProbeScheduler

__all__ = [
    "CacheStore",
    "DeviceRegistry",
    "Engine",
    "HttpDirectory",
    "LivenessTracker",
    "NotificationSink",
    "PingProber",
    "ProbeScheduler",
    "Prober",
    "RemoteDirectory",
    "transition_message",
]
