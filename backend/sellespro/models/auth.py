from __future__ import annotations

import enum
from dataclasses import dataclass, field

# The bootstrap manager account is identified by username, not role
BOOTSTRAP_USERNAME = "admin"


class Role(str, enum.Enum):
    """Closed set of operator roles."""
    MANAGER = "MANAGER"
    USER = "USER"


@dataclass(frozen=True)
class User:
    """
    Staff account.

    password_hash is a bcrypt hash; it is only serialized into the persisted
    snapshot, never into API responses.
    """
    id: str
    username: str
    password_hash: str = field(repr=False)
    role: Role = Role.USER

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

    @property
    def is_bootstrap(self) -> bool:
        return self.username == BOOTSTRAP_USERNAME

    def to_dict(self, include_secret: bool = False) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "role": self.role.value,
        }
        if include_secret:
            data["passwordHash"] = self.password_hash
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=str(data["id"]),
            username=data["username"],
            password_hash=data.get("passwordHash", ""),
            role=Role(data.get("role", Role.USER.value)),
        )
