import uuid
from typing import Callable, List, Optional

from restobook.models.restaurant import Restaurant
from restobook.repositories.store import KeyValueStore


def new_id() -> str:
    return str(uuid.uuid4())


class RestaurantRepository:
    def __init__(self, store: KeyValueStore, id_factory: Callable[[], str] = new_id):
        self.store = store
        self.id_factory = id_factory

    def find_all(self) -> List[Restaurant]:
        return [Restaurant.from_dict(row) for row in self.store.values()]

    def find_by_id(self, restaurant_id: str) -> Optional[Restaurant]:
        row = self.store.get(restaurant_id)
        if row:
            return Restaurant.from_dict(row)
        return None

    def create(self, restaurant: Restaurant) -> Restaurant:
        restaurant.id = self.id_factory()
        self.store.put(restaurant.id, restaurant.to_dict())
        return restaurant

    def update(self, restaurant: Restaurant) -> Restaurant:
        self.store.put(restaurant.id, restaurant.to_dict())
        return restaurant

    def delete(self, restaurant_id: str) -> Optional[Restaurant]:
        row = self.store.remove(restaurant_id)
        if row:
            return Restaurant.from_dict(row)
        return None
