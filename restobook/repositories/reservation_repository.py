from typing import Callable, List, Optional

from restobook.models.reservation import Reservation
from restobook.repositories.restaurant_repository import new_id
from restobook.repositories.store import KeyValueStore


class ReservationRepository:
    def __init__(self, store: KeyValueStore, id_factory: Callable[[], str] = new_id):
        self.store = store
        self.id_factory = id_factory

    def create(self, reservation: Reservation) -> Reservation:
        reservation.id = self.id_factory()
        self.store.put(reservation.id, reservation.to_dict())
        return reservation

    def save(self, reservation: Reservation) -> Reservation:
        self.store.put(reservation.id, reservation.to_dict())
        return reservation

    def find_by_id(self, reservation_id: str) -> Optional[Reservation]:
        row = self.store.get(reservation_id)
        if row:
            return Reservation.from_dict(row)
        return None

    def find_all(self) -> List[Reservation]:
        return [Reservation.from_dict(row) for row in self.store.values()]

    def find_by_restaurant(self, restaurant_id: str) -> List[Reservation]:
        return [r for r in self.find_all() if r.restaurant_id == restaurant_id]

    def find_active_by_restaurant(self, restaurant_id: str) -> List[Reservation]:
        return [r for r in self.find_by_restaurant(restaurant_id) if r.is_active]

    def find_active_for_slot(self, restaurant_id: str, table_id: int, date: str, time: str,
                             exclude_id: Optional[str] = None) -> List[Reservation]:
        """Active reservations holding the given table at date/time, optionally skipping one id."""
        slot = (restaurant_id, table_id, date, time)
        return [
            r for r in self.find_by_restaurant(restaurant_id)
            if r.is_active and r.slot == slot and r.id != exclude_id
        ]
