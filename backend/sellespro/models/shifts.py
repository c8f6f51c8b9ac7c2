from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime

from ..time_utils import parse_iso_datetime, to_utc_z


class ShiftType(str, enum.Enum):
    A = "A"
    B = "B"


@dataclass(frozen=True)
class ShiftRecord:
    """
    Cashier shift.

    LIFECYCLE:
    - active: created on activation, can process sales
    - closed: is_active=False with end_time set; never reopened
    """
    id: str
    user_id: str
    start_time: datetime
    type: ShiftType
    end_time: datetime | None = None
    is_active: bool = True

    def close(self, at: datetime) -> "ShiftRecord":
        return replace(self, is_active=False, end_time=at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "startTime": to_utc_z(self.start_time),
            "endTime": to_utc_z(self.end_time),
            "type": self.type.value,
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShiftRecord":
        return cls(
            id=str(data["id"]),
            user_id=str(data["userId"]),
            start_time=parse_iso_datetime(data["startTime"]),
            type=ShiftType(data["type"]),
            end_time=parse_iso_datetime(data.get("endTime")),
            is_active=bool(data.get("isActive", False)),
        )
