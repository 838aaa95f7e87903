"""Error taxonomy shared by the registry, the cache and the CLI."""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not-found"
    SERVER_FAULT = "server-fault"
    CONNECTIVITY = "connectivity"
    OFFLINE = "offline"
    CACHE_FAULT = "cache-fault"
    UNKNOWN = "unknown"


class PingwatchError(Exception):
    """Base class for every error raised by pingwatch."""


class ConfigError(PingwatchError):
    pass


class CacheError(PingwatchError):
    pass


class DirectoryError(PingwatchError):
    """A remote directory call failed.

    ``status`` is the HTTP status code, or ``None`` when no response arrived.
    """

    def __init__(self, status: int | None, message: str = "") -> None:
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}" if status is not None else message)

    @property
    def is_connectivity(self) -> bool:
        return self.status is None


class RegistryError(PingwatchError):
    def __init__(self, category: ErrorCategory, title: str, message: str) -> None:
        self.category = category
        self.title = title
        self.message = message
        super().__init__(f"{title}: {message}")


def category_for_status(status: int | None) -> ErrorCategory:
    if status is None:
        return ErrorCategory.CONNECTIVITY
    if status == 400:
        return ErrorCategory.VALIDATION
    if status == 404:
        return ErrorCategory.NOT_FOUND
    if status == 409:
        return ErrorCategory.CONFLICT
    if status >= 500:
        return ErrorCategory.SERVER_FAULT
    return ErrorCategory.UNKNOWN


def humanize_error(status: int, message: str = "") -> str:
    """Translate a directory error response into a message for the user."""
    if status == 400:
        if "Missing required fields" in message:
            return (
                "Some required information is missing.\n"
                "Please check that all fields are filled correctly."
            )
        if "Invalid IPv4 address" in message:
            return (
                "The IP address you entered is not valid.\n"
                "Please enter a valid IP address (e.g., 192.168.1.1)."
            )
        if "Name cannot be empty" in message:
            return "The name cannot be empty.\nPlease enter a name for this device."
        return (
            "The information you provided is not valid.\n"
            "Please check your input and try again."
        )
    if status == 404:
        return (
            "The device you are trying to modify was not found.\n"
            "It may have been deleted by another user."
        )
    if status == 409:
        if "UNIQUE constraint" in message:
            return (
                "A device with this IP address already exists.\n"
                "Please use a different IP address."
            )
        return (
            "This action conflicts with existing data.\nThe device may already exist."
        )
    if status == 500:
        return (
            "The server encountered an unexpected error.\n"
            "Please try again later or contact support if the problem persists."
        )
    if message:
        return message
    return "An unexpected error occurred.\nPlease try again."


CONNECTION_ERROR_MESSAGE = (
    "Unable to connect to the server. Please check your connection and try again."
)
