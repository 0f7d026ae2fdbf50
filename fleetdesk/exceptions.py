"""
Custom exception classes for the fleetdesk booking core.

Every error carries a machine-readable ``kind`` and the HTTP status the
controllers answer with, so the blueprints can render a consistent JSON
envelope instead of generic 500 errors.
"""


class FleetdeskError(Exception):
    """Base class for all scheduling and lifecycle errors."""

    kind = "Error"
    status_code = 400
    default_message = "Error: request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class ValidationError(FleetdeskError):
    """Raised when a payload is missing fields or carries malformed values."""

    kind = "ValidationError"
    default_message = "Error: invalid request"


class InvalidInterval(ValidationError):
    """Raised when start date is after end date or an invalid date is provided."""

    kind = "InvalidInterval"
    default_message = "Error: end date must be after start date"


class NotFound(FleetdeskError):
    """Raised when a rental or booking request id is unknown."""

    kind = "NotFound"
    status_code = 404
    default_message = "Error: record not found"


class VehicleNotFound(NotFound):
    """Raised when a vehicle id or name cannot be resolved."""

    kind = "VehicleNotFound"
    default_message = "Error: vehicle not found"


class CustomerNotFound(NotFound):
    """Raised when a customer id or email cannot be resolved."""

    kind = "CustomerNotFound"
    default_message = "Error: customer not found"


class CustomerBlacklisted(FleetdeskError):
    """Raised when a blacklisted customer reaches a booking entry point."""

    kind = "CustomerBlacklisted"
    status_code = 403
    default_message = "Error: account has been suspended"


class InvalidTransition(FleetdeskError):
    """Raised when a state machine is asked for a transition it does not allow."""

    kind = "InvalidTransition"
    default_message = "Error: status transition not allowed"

    def __init__(self, message: str | None = None, current=None, target=None) -> None:
        if message is None and current is not None and target is not None:
            message = f"Error: cannot move from '{_value(current)}' to '{_value(target)}'"
        self.current = current
        self.target = target
        super().__init__(message)


class VehicleUnavailable(FleetdeskError):
    """Raised when a vehicle is already booked for (part of) the requested dates."""

    kind = "VehicleUnavailable"
    status_code = 409
    default_message = "Error: vehicle is not available for the selected dates"

    def __init__(self, message: str | None = None, conflicts: list | None = None) -> None:
        self.conflicts = list(conflicts or [])
        super().__init__(message)

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["conflicts"] = [c.to_dict() if hasattr(c, "to_dict") else c for c in self.conflicts]
        return out


class StorageUnavailable(FleetdeskError):
    """Raised when the database cannot be reached or a storage call times out."""

    kind = "StorageUnavailable"
    status_code = 503
    default_message = "Error: storage is temporarily unavailable"


def _value(status):
    return getattr(status, "value", status)
