"""Error taxonomy shared by repositories and services.

Every domain failure is a ValueError subclass so callers that only know about
ValueError keep working. ``kind`` is the short name surfaced in results.
"""


class ReservationSystemError(ValueError):
    kind = "error"


class ValidationError(ReservationSystemError):
    """Missing or malformed input field."""
    kind = "validation"


class NotFoundError(ReservationSystemError):
    """Referenced id is absent from the store."""
    kind = "not_found"


class ConflictError(ReservationSystemError):
    """Slot already booked, or an illegal status transition."""
    kind = "conflict"


class StoreError(ReservationSystemError):
    """Store bounds violated or collection opened with different parameters."""
    kind = "store"
