from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class Severity(str, Enum):
    WHITE = "white"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


def local_timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


class Notification(BaseModel):
    """One entry of the notification log.

    Serialized with the log keys ``swId`` and ``color``; the attribute names are
    accepted on load as well.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4)
    device_id: int = Field(
        serialization_alias="swId",
        validation_alias=AliasChoices("swId", "device_id"),
    )
    message: str = Field(min_length=1, max_length=500)
    timestamp: str = Field(default_factory=local_timestamp)
    severity: Severity = Field(
        default=Severity.WHITE,
        serialization_alias="color",
        validation_alias=AliasChoices("color", "severity"),
    )

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
