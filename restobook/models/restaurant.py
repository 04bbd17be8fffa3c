from dataclasses import dataclass, field
from typing import List, Optional

from restobook.core.errors import ValidationError
from restobook.core.result import Result

REQUIRED_FIELDS = ("name", "location", "capacity", "openingHours", "tables")


def is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class OpeningHours:
    start: str
    end: str

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass
class Table:
    id: int
    available: bool = True

    def to_dict(self) -> dict:
        return {"id": self.id, "available": self.available}


@dataclass
class RestaurantPayload:
    name: str
    location: str
    capacity: int
    opening_hours: OpeningHours
    tables: List[Table] = field(default_factory=list)


@dataclass
class Restaurant:
    id: str
    name: str
    location: str
    capacity: int
    opening_hours: OpeningHours
    tables: List[Table] = field(default_factory=list)

    @classmethod
    def from_payload(cls, restaurant_id: str, payload: RestaurantPayload) -> "Restaurant":
        return cls(
            id=restaurant_id,
            name=payload.name,
            location=payload.location,
            capacity=payload.capacity,
            opening_hours=payload.opening_hours,
            tables=list(payload.tables),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Restaurant":
        hours = data["openingHours"]
        return cls(
            id=data["id"],
            name=data["name"],
            location=data["location"],
            capacity=data["capacity"],
            opening_hours=OpeningHours(start=hours["start"], end=hours["end"]),
            tables=[Table(id=t["id"], available=t.get("available", True)) for t in data["tables"]],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "capacity": self.capacity,
            "openingHours": self.opening_hours.to_dict(),
            "tables": [table.to_dict() for table in self.tables],
        }

    def find_table(self, table_id: int) -> Optional[Table]:
        for table in self.tables:
            if table.id == table_id:
                return table
        return None

    def table_ids(self) -> List[int]:
        return [table.id for table in self.tables]


def _parse_tables(raw) -> List[Table]:
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("tables must be a list.")
    tables = []
    seen = set()
    for item in raw:
        if not isinstance(item, dict) or not is_int(item.get("id")) or item["id"] <= 0:
            raise ValidationError("Every table needs a positive integer id.")
        if item["id"] in seen:
            raise ValidationError(f"Duplicate table id {item['id']}.")
        seen.add(item["id"])
        available = item.get("available", True)
        if not isinstance(available, bool):
            raise ValidationError(f"Table {item['id']}: available must be true or false.")
        tables.append(Table(id=item["id"], available=available))
    return tables


def validate_restaurant_payload(data) -> Result:
    """Check a raw restaurant payload; Ok carries a RestaurantPayload."""
    if not isinstance(data, dict):
        return Result.err("Invalid payload", ValidationError.kind)
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        return Result.err(f"Invalid payload: missing {', '.join(missing)}", ValidationError.kind)

    name, location = data["name"], data["location"]
    if not isinstance(name, str) or not name.strip():
        return Result.err("name must be non-empty text.", ValidationError.kind)
    if not isinstance(location, str) or not location.strip():
        return Result.err("location must be non-empty text.", ValidationError.kind)
    if not is_int(data["capacity"]) or data["capacity"] <= 0:
        return Result.err("capacity must be a positive integer.", ValidationError.kind)

    hours = data["openingHours"]
    if not isinstance(hours, dict) or not hours.get("start") or not hours.get("end"):
        return Result.err("openingHours needs start and end.", ValidationError.kind)
    for key in ("start", "end"):
        if not isinstance(hours[key], str) or not hours[key].strip():
            return Result.err(f"openingHours.{key} must be non-empty text.", ValidationError.kind)

    try:
        tables = _parse_tables(data["tables"])
    except ValidationError as exc:
        return Result.err(str(exc), exc.kind)

    return Result.ok(RestaurantPayload(
        name=name,
        location=location,
        capacity=data["capacity"],
        opening_hours=OpeningHours(start=hours["start"], end=hours["end"]),
        tables=tables,
    ))
