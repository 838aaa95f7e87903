"""Data models for pingwatch."""

from pingwatch.models.device import (
    Device,
    Direction,
    ReachabilityRecord,
    ReachabilityState,
    TransitionEvent,
)
from pingwatch.models.notification import Notification, Severity, local_timestamp
from pingwatch.models.validation import (
    check_device_name,
    check_ipv4_address,
    is_ipv4_address,
)

__all__ = [
    "Device",
    "Direction",
    "Notification",
    "ReachabilityRecord",
    "ReachabilityState",
    "Severity",
    "TransitionEvent",
    "check_device_name",
    "check_ipv4_address",
    "is_ipv4_address",
    "local_timestamp",
]
