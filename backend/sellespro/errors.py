"""
Error taxonomy for the POS core.

Every core operation either returns its result or raises one of these.
None of them is fatal: routes turn them into JSON error bodies using
`status_code`, and the state is never left half-updated because
transitions only swap in a new state after they succeed.
"""


class PosError(Exception):
    """Base class for recoverable POS errors."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(PosError, ValueError):
    """400-level input problem (shape or range)."""


class NotFoundError(PosError, LookupError):
    """Stale or unknown id reference."""

    status_code = 404


class InsufficientStockError(PosError):
    """A requested quantity exceeds the live stock count."""

    status_code = 409

    def __init__(
        self,
        product_id: str,
        name: str,
        requested: int,
        available: int,
        details: dict | None = None,
    ):
        self.product_id = product_id
        self.name = name
        self.requested = requested
        self.available = available
        self.shortfall = requested - available
        payload = {
            "product_id": product_id,
            "name": name,
            "requested": requested,
            "available": available,
            "shortfall": self.shortfall,
        }
        payload.update(details or {})
        super().__init__(
            f"Insufficient stock for {name}: requested {requested}, only {available} available",
            details=payload,
        )


class AuthenticationError(PosError):
    """Bad credentials. The message never says which field was wrong."""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class ShiftAlreadyActiveError(PosError):
    status_code = 409

    def __init__(self, active_shift_id: str):
        super().__init__(
            "A shift is already active. Deactivate it before starting a new one.",
            details={"active_shift_id": active_shift_id},
        )


class NoActiveShiftError(PosError):
    status_code = 409

    def __init__(self, message: str = "No active shift. Activate a shift first."):
        super().__init__(message)


class EmptyCartError(PosError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class ProtectedAccountError(PosError):
    status_code = 403
