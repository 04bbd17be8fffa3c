"""Operation boundary: every call returns a Result and never raises."""
import logging
from typing import Callable, Optional

from restobook.core.clock import Clock
from restobook.core.config import Settings
from restobook.core.errors import ReservationSystemError
from restobook.core.result import Result
from restobook.repositories.reservation_repository import ReservationRepository
from restobook.repositories.restaurant_repository import RestaurantRepository
from restobook.repositories.store import InMemoryStore, KeyValueStore
from restobook.services.locks import RestaurantLocks
from restobook.services.reservation_service import ReservationService
from restobook.services.restaurant_service import RestaurantService

logger = logging.getLogger(__name__)


def _as_data(value):
    if isinstance(value, list):
        return [item.to_dict() for item in value]
    return value.to_dict()


def open_stores(settings: Settings):
    """Return (restaurants, reservations) collections for the configured backend."""
    if settings.store_backend == "postgres":
        from restobook.repositories.postgres_store import PostgresStore

        return (
            PostgresStore(settings, settings.restaurants_collection_id,
                          settings.store_max_key_size, settings.store_max_value_size),
            PostgresStore(settings, settings.reservations_collection_id,
                          settings.store_max_key_size, settings.store_max_value_size),
        )
    if settings.store_backend != "memory":
        raise ValueError(f"Unknown STORE_BACKEND {settings.store_backend!r}")
    return (
        InMemoryStore(settings.restaurants_collection_id, settings.store_max_key_size, settings.store_max_value_size),
        InMemoryStore(settings.reservations_collection_id, settings.store_max_key_size, settings.store_max_value_size),
    )


class ReservationSystem:
    def __init__(self, restaurant_store: KeyValueStore, reservation_store: KeyValueStore,
                 clock: Optional[Clock] = None):
        restaurant_repo = RestaurantRepository(restaurant_store)
        reservation_repo = ReservationRepository(reservation_store)
        locks = RestaurantLocks()
        self.restaurants = RestaurantService(restaurant_repo, reservation_repo, locks)
        self.reservations = ReservationService(restaurant_repo, reservation_repo, clock, locks)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReservationSystem":
        restaurant_store, reservation_store = open_stores(settings)
        return cls(restaurant_store, reservation_store)

    def _run(self, action: str, operation: Callable, *args) -> Result:
        try:
            return Result.ok(_as_data(operation(*args)))
        except ReservationSystemError as exc:
            logger.warning(f"{action} rejected: {exc}")
            return Result.err(str(exc), exc.kind)
        except Exception as exc:
            logger.exception(f"Failed to {action}")
            return Result.err(f"Failed to {action}: {exc}")

    # Restaurantes
    def get_restaurants(self) -> Result:
        return self._run("retrieve restaurants", self.restaurants.list_restaurants)

    def get_restaurant(self, restaurant_id: str) -> Result:
        return self._run("retrieve restaurant", self.restaurants.get_restaurant, restaurant_id)

    def add_restaurant(self, payload: dict) -> Result:
        return self._run("add restaurant", self.restaurants.create_restaurant, payload)

    def update_restaurant(self, restaurant_id: str, payload: dict) -> Result:
        return self._run("update restaurant", self.restaurants.update_restaurant, restaurant_id, payload)

    def delete_restaurant(self, restaurant_id: str) -> Result:
        return self._run("delete restaurant", self.restaurants.delete_restaurant, restaurant_id)

    def get_available_tables(self, restaurant_id: str, date: str, time: str, party_size: int) -> Result:
        return self._run("check availability", self.reservations.available_tables,
                         restaurant_id, date, time, party_size)

    # Reservas
    def get_reservations(self) -> Result:
        return self._run("retrieve reservations", self.reservations.list_reservations)

    def get_restaurant_reservations(self, restaurant_id: str) -> Result:
        return self._run("retrieve reservations", self.reservations.list_for_restaurant, restaurant_id)

    def get_reservation(self, reservation_id: str) -> Result:
        return self._run("retrieve reservation", self.reservations.get_reservation, reservation_id)

    def create_reservation(self, payload: dict) -> Result:
        return self._run("create reservation", self.reservations.create_reservation, payload)

    def update_reservation(self, reservation_id: str, payload: dict) -> Result:
        return self._run("update reservation", self.reservations.update_reservation, reservation_id, payload)

    def edit_reservation(self, reservation_id: str, details: dict) -> Result:
        return self._run("edit reservation", self.reservations.edit_details, reservation_id, details)

    def change_reservation_status(self, reservation_id: str, status) -> Result:
        return self._run("change reservation status", self.reservations.change_status, reservation_id, status)

    def confirm_reservation(self, reservation_id: str) -> Result:
        return self._run("confirm reservation", self.reservations.confirm_reservation, reservation_id)

    def cancel_reservation(self, reservation_id: str) -> Result:
        return self._run("cancel reservation", self.reservations.cancel_reservation, reservation_id)
