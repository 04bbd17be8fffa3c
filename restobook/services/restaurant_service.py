import logging
from typing import List, Optional

from restobook.core.errors import ConflictError, NotFoundError, ValidationError
from restobook.models.restaurant import Restaurant, validate_restaurant_payload
from restobook.repositories.reservation_repository import ReservationRepository
from restobook.repositories.restaurant_repository import RestaurantRepository
from restobook.services.locks import RestaurantLocks

logger = logging.getLogger(__name__)


class RestaurantService:
    def __init__(self, restaurant_repo: RestaurantRepository, reservation_repo: ReservationRepository,
                 locks: Optional[RestaurantLocks] = None):
        self.restaurant_repo = restaurant_repo
        self.reservation_repo = reservation_repo
        self.locks = locks or RestaurantLocks()

    def list_restaurants(self) -> List[Restaurant]:
        return self.restaurant_repo.find_all()

    def get_restaurant(self, restaurant_id: str) -> Restaurant:
        restaurant = self.restaurant_repo.find_by_id(restaurant_id)
        if not restaurant:
            raise NotFoundError(f"Restaurant with ID={restaurant_id} not found")
        return restaurant

    def create_restaurant(self, data: dict) -> Restaurant:
        result = validate_restaurant_payload(data)
        if not result.success:
            raise ValidationError(result.error)
        restaurant = self.restaurant_repo.create(Restaurant.from_payload("", result.data))
        logger.info(f"Restaurant {restaurant.id} created with {len(restaurant.tables)} tables")
        return restaurant

    def update_restaurant(self, restaurant_id: str, data: dict) -> Restaurant:
        result = validate_restaurant_payload(data)
        if not result.success:
            raise ValidationError(result.error)

        with self.locks.hold(restaurant_id):
            existing = self.get_restaurant(restaurant_id)
            updated = Restaurant.from_payload(existing.id, result.data)

            # Las reservas activas deben seguir apuntando a una mesa existente y caber en la capacidad
            table_ids = set(updated.table_ids())
            for reservation in self.reservation_repo.find_active_by_restaurant(existing.id):
                if reservation.table_id not in table_ids:
                    raise ConflictError(
                        f"Table {reservation.table_id} is held by active reservation {reservation.id}."
                    )
                if reservation.party_size > updated.capacity:
                    raise ConflictError(
                        f"Active reservation {reservation.id} seats {reservation.party_size}, "
                        f"more than the new capacity {updated.capacity}."
                    )

            self.restaurant_repo.update(updated)
        logger.info(f"Restaurant {restaurant_id} updated")
        return updated

    def delete_restaurant(self, restaurant_id: str) -> Restaurant:
        with self.locks.hold(restaurant_id):
            self.get_restaurant(restaurant_id)
            active = self.reservation_repo.find_active_by_restaurant(restaurant_id)
            if active:
                raise ConflictError(
                    f"Restaurant with ID={restaurant_id} has {len(active)} active reservations."
                )
            deleted = self.restaurant_repo.delete(restaurant_id)
        logger.info(f"Restaurant {restaurant_id} deleted")
        return deleted
