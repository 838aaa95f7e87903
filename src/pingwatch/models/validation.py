from __future__ import annotations

import re

_DOTTED_QUAD = re.compile(r"([0-9]{1,3}\.){3}[0-9]{1,3}")

NAME_MAX_LENGTH = 50


def is_ipv4_address(value: str) -> bool:
    if not _DOTTED_QUAD.fullmatch(value):
        return False
    return all(0 <= int(octet) <= 255 for octet in value.split("."))


def check_ipv4_address(value: str) -> str:
    value = value.strip()
    if not _DOTTED_QUAD.fullmatch(value):
        raise ValueError("Invalid IP address format")
    if not is_ipv4_address(value):
        raise ValueError("IP address octets must be between 0-255")
    return value


def check_device_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name cannot be empty")
    if len(value) > NAME_MAX_LENGTH:
        raise ValueError(f"Name cannot be longer than {NAME_MAX_LENGTH} characters")
    return value
