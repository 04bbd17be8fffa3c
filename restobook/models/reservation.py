from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from restobook.core.errors import ValidationError
from restobook.core.result import Result
from restobook.models.restaurant import is_int

REQUIRED_FIELDS = ("restaurantId", "date", "time", "partySize", "contactInfo", "tableId", "status")
DETAIL_FIELDS = ("date", "time", "partySize", "contactInfo")


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "ReservationStatus":
        if isinstance(value, cls):
            return value
        # {"cancelled": null} es la forma variante que envían clientes antiguos
        if isinstance(value, dict) and len(value) == 1:
            value = next(iter(value))
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown status {value!r}.")


# Los bucles sobre pending/confirmed son ediciones idempotentes; cancelled es terminal.
TRANSITIONS = {
    ReservationStatus.PENDING: {ReservationStatus.PENDING, ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
    ReservationStatus.CONFIRMED: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
    ReservationStatus.CANCELLED: set(),
}

ACTIVE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


def can_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    return target in TRANSITIONS[current]


@dataclass
class ReservationPayload:
    restaurant_id: str
    date: str
    time: str
    party_size: int
    contact_info: str
    table_id: int
    status: ReservationStatus = ReservationStatus.PENDING


@dataclass
class ReservationDetails:
    date: str
    time: str
    party_size: int
    contact_info: str
    table_id: Optional[int] = None


@dataclass
class Reservation:
    id: str
    restaurant_id: str
    date: str
    time: str
    party_size: int
    contact_info: str
    table_id: int
    status: ReservationStatus
    created_at: int
    updated_at: Optional[int] = None

    @property
    def slot(self) -> Tuple[str, int, str, str]:
        return (self.restaurant_id, self.table_id, self.date, self.time)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def with_changes(self, **changes) -> "Reservation":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict) -> "Reservation":
        return cls(
            id=data["id"],
            restaurant_id=data["restaurantId"],
            date=data["date"],
            time=data["time"],
            party_size=data["partySize"],
            contact_info=data["contactInfo"],
            table_id=data["tableId"],
            status=ReservationStatus.parse(data["status"]),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "restaurantId": self.restaurant_id,
            "date": self.date,
            "time": self.time,
            "partySize": self.party_size,
            "contactInfo": self.contact_info,
            "tableId": self.table_id,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def _check_text(data: dict, name: str) -> None:
    if not isinstance(data[name], str) or not data[name].strip():
        raise ValidationError(f"{name} must be non-empty text.")


def _check_positive_int(data: dict, name: str) -> None:
    if not is_int(data[name]) or data[name] <= 0:
        raise ValidationError(f"{name} must be a positive integer.")


def validate_reservation_payload(data) -> Result:
    """Check a raw reservation payload before any store access."""
    if not isinstance(data, dict):
        return Result.err("Invalid payload", ValidationError.kind)
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        return Result.err(f"Invalid payload: missing {', '.join(missing)}", ValidationError.kind)
    try:
        for name in ("restaurantId", "date", "time", "contactInfo"):
            _check_text(data, name)
        _check_positive_int(data, "partySize")
        _check_positive_int(data, "tableId")
        status = ReservationStatus.parse(data["status"])
    except ValidationError as exc:
        return Result.err(str(exc), exc.kind)
    return Result.ok(ReservationPayload(
        restaurant_id=data["restaurantId"],
        date=data["date"],
        time=data["time"],
        party_size=data["partySize"],
        contact_info=data["contactInfo"],
        table_id=data["tableId"],
        status=status,
    ))


def validate_reservation_details(data) -> Result:
    """Like validate_reservation_payload, for the editable subset. tableId is optional."""
    if not isinstance(data, dict):
        return Result.err("Invalid payload", ValidationError.kind)
    missing = [name for name in DETAIL_FIELDS if not data.get(name)]
    if missing:
        return Result.err(f"Invalid payload: missing {', '.join(missing)}", ValidationError.kind)
    try:
        for name in ("date", "time", "contactInfo"):
            _check_text(data, name)
        _check_positive_int(data, "partySize")
        if data.get("tableId") is not None:
            _check_positive_int(data, "tableId")
    except ValidationError as exc:
        return Result.err(str(exc), exc.kind)
    return Result.ok(ReservationDetails(
        date=data["date"],
        time=data["time"],
        party_size=data["partySize"],
        contact_info=data["contactInfo"],
        table_id=data.get("tableId"),
    ))
