"""Device models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pingwatch.models.validation import check_device_name, check_ipv4_address


class Device(BaseModel):
    """A named, addressable endpoint monitored for reachability.

    The directory server and the local cache both call the address ``ip``;
    the alias keeps that wire format while the attribute reads ``address``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    name: str
    address: str = Field(alias="ip")

    @field_validator("address")
    @classmethod
    def _valid_address(cls, value: str) -> str:
        return check_ipv4_address(value)

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return check_device_name(value)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class Direction(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


# Derived state shares the UP/DOWN vocabulary of transitions.
ReachabilityState = Direction


class ReachabilityRecord(BaseModel):
    """Miss counter for one device. Owned and mutated by the liveness tracker."""

    model_config = ConfigDict(extra="forbid")

    device_id: int
    consecutive_misses: int = Field(default=0, ge=0)

    def state(self, max_missed_probes: int) -> ReachabilityState:
        if self.consecutive_misses < max_missed_probes:
            return ReachabilityState.UP
        return ReachabilityState.DOWN


class TransitionEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    device_id: int
    direction: Direction
