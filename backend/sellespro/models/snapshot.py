from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class StateSnapshot(db.Model):
    """
    Persisted copy of the whole application state.

    WHY: The in-memory state is authoritative; this row is rewritten after
    every mutating operation and read back at startup. There is only ever one
    row (id=1).
    """
    __tablename__ = "state_snapshots"

    id = db.Column(db.Integer, primary_key=True)
    payload = db.Column(db.JSON, nullable=False)
    saved_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "saved_at": to_utc_z(self.saved_at),
            "products": len(self.payload.get("products", [])),
            "sales": len(self.payload.get("sales", [])),
            "users": len(self.payload.get("users", [])),
        }
