import logging
from contextlib import contextmanager
from typing import List, Optional

from restobook.core.clock import Clock
from restobook.core.errors import ConflictError, NotFoundError, ValidationError
from restobook.models.reservation import (
    Reservation,
    ReservationStatus,
    can_transition,
    validate_reservation_details,
    validate_reservation_payload,
)
from restobook.models.restaurant import Table, is_int
from restobook.repositories.reservation_repository import ReservationRepository
from restobook.repositories.restaurant_repository import RestaurantRepository
from restobook.services.locks import RestaurantLocks

logger = logging.getLogger(__name__)


class ReservationService:
    def __init__(self, restaurant_repo: RestaurantRepository, reservation_repo: ReservationRepository,
                 clock: Optional[Clock] = None, locks: Optional[RestaurantLocks] = None):
        self.restaurant_repo = restaurant_repo
        self.reservation_repo = reservation_repo
        self.clock = clock or Clock()
        self.locks = locks or RestaurantLocks()

    def list_reservations(self) -> List[Reservation]:
        return self.reservation_repo.find_all()

    def list_for_restaurant(self, restaurant_id: str) -> List[Reservation]:
        return self.reservation_repo.find_by_restaurant(restaurant_id)

    def get_reservation(self, reservation_id: str) -> Reservation:
        reservation = self.reservation_repo.find_by_id(reservation_id)
        if not reservation:
            raise NotFoundError(f"Reservation with ID={reservation_id} not found")
        return reservation

    def _check_availability(self, candidate: Reservation, exclude_id: Optional[str] = None) -> None:
        # 1. Validar existencia de restaurante y mesa
        restaurant = self.restaurant_repo.find_by_id(candidate.restaurant_id)
        if not restaurant:
            raise ValidationError(f"Unknown restaurant {candidate.restaurant_id}.")
        table = restaurant.find_table(candidate.table_id)
        if not table:
            raise ValidationError(f"Unknown table {candidate.table_id} for restaurant {restaurant.id}.")

        # 2. Validar que la mesa esté en servicio y que el grupo quepa
        if not table.available:
            raise ConflictError(f"Table {table.id} is not available for booking.")
        if candidate.party_size > restaurant.capacity:
            raise ValidationError(
                f"Party of {candidate.party_size} exceeds capacity of {restaurant.capacity}."
            )

        # 3. Validar disponibilidad (evitar doble reserva de la franja)
        holders = self.reservation_repo.find_active_for_slot(
            candidate.restaurant_id, candidate.table_id, candidate.date, candidate.time,
            exclude_id=exclude_id,
        )
        if holders:
            raise ConflictError("Table already booked for that slot.")

    def create_reservation(self, data: dict) -> Reservation:
        result = validate_reservation_payload(data)
        if not result.success:
            raise ValidationError(result.error)
        payload = result.data

        candidate = Reservation(
            id="",
            restaurant_id=payload.restaurant_id,
            date=payload.date,
            time=payload.time,
            party_size=payload.party_size,
            contact_info=payload.contact_info,
            table_id=payload.table_id,
            status=ReservationStatus.PENDING,
            created_at=0,
        )
        with self.locks.hold(candidate.restaurant_id):
            self._check_availability(candidate)
            candidate.created_at = self.clock.now()
            reservation = self.reservation_repo.create(candidate)

        logger.info(
            f"Reservation {reservation.id} created for table {reservation.table_id} "
            f"at {reservation.date} {reservation.time}"
        )
        return reservation

    @contextmanager
    def _hold_reservation(self, reservation_id: str, *restaurant_ids: str):
        """Lock the reservation's restaurant (plus any extra ids) and yield a fresh copy of it."""
        while True:
            existing = self.get_reservation(reservation_id)
            held = (existing.restaurant_id,) + restaurant_ids
            with self.locks.hold(*held):
                current = self.get_reservation(reservation_id)
                if current.restaurant_id in held:
                    yield current
                    return
            # Se movió a otro restaurante mientras esperábamos el lock
            logger.debug(f"Reservation {reservation_id} moved to {current.restaurant_id}, retrying lock")

    def _apply(self, existing: Reservation, candidate: Reservation) -> Reservation:
        """Guard, stamp and persist a change. Caller holds the restaurant locks."""
        if existing.status == ReservationStatus.CANCELLED:
            raise ConflictError(f"Reservation {existing.id} is cancelled and cannot be changed.")
        if not can_transition(existing.status, candidate.status):
            raise ConflictError(
                f"Cannot move reservation {existing.id} from {existing.status.value} to {candidate.status.value}."
            )
        if candidate.is_active and (candidate.slot != existing.slot or candidate.party_size != existing.party_size):
            self._check_availability(candidate, exclude_id=existing.id)

        candidate = candidate.with_changes(
            id=existing.id, created_at=existing.created_at, updated_at=self.clock.now()
        )
        return self.reservation_repo.save(candidate)

    def update_reservation(self, reservation_id: str, data: dict) -> Reservation:
        """Full replace of every mutable field, status included."""
        result = validate_reservation_payload(data)
        if not result.success:
            raise ValidationError(result.error)
        payload = result.data

        with self._hold_reservation(reservation_id, payload.restaurant_id) as existing:
            updated = self._apply(existing, existing.with_changes(
                restaurant_id=payload.restaurant_id,
                date=payload.date,
                time=payload.time,
                party_size=payload.party_size,
                contact_info=payload.contact_info,
                table_id=payload.table_id,
                status=payload.status,
            ))
        logger.info(f"Reservation {reservation_id} updated ({updated.status.value})")
        return updated

    def edit_details(self, reservation_id: str, data: dict) -> Reservation:
        result = validate_reservation_details(data)
        if not result.success:
            raise ValidationError(result.error)
        details = result.data

        with self._hold_reservation(reservation_id) as existing:
            updated = self._apply(existing, existing.with_changes(
                date=details.date,
                time=details.time,
                party_size=details.party_size,
                contact_info=details.contact_info,
                table_id=details.table_id if details.table_id is not None else existing.table_id,
            ))
        logger.info(f"Reservation {reservation_id} details edited")
        return updated

    def change_status(self, reservation_id: str, status) -> Reservation:
        if not status:
            raise ValidationError("Invalid payload: missing status")
        target = ReservationStatus.parse(status)
        if target == ReservationStatus.CANCELLED:
            return self.cancel_reservation(reservation_id)

        with self._hold_reservation(reservation_id) as existing:
            updated = self._apply(existing, existing.with_changes(status=target))
        logger.info(f"Reservation {reservation_id} is now {target.value}")
        return updated

    def confirm_reservation(self, reservation_id: str) -> Reservation:
        return self.change_status(reservation_id, ReservationStatus.CONFIRMED)

    def cancel_reservation(self, reservation_id: str) -> Reservation:
        """Force the cancelled status from any state; repeated calls only refresh updatedAt."""
        with self._hold_reservation(reservation_id) as existing:
            cancelled = existing.with_changes(
                status=ReservationStatus.CANCELLED, updated_at=self.clock.now()
            )
            self.reservation_repo.save(cancelled)
        logger.info(f"Reservation {reservation_id} cancelled")
        return cancelled

    def available_tables(self, restaurant_id: str, date: str, time: str, party_size: int) -> List[Table]:
        """Tables in service that seat the party and are free at date/time."""
        if not date or not time:
            raise ValidationError("date and time are required.")
        if not is_int(party_size) or party_size <= 0:
            raise ValidationError("partySize must be a positive integer.")
        restaurant = self.restaurant_repo.find_by_id(restaurant_id)
        if not restaurant:
            raise NotFoundError(f"Restaurant with ID={restaurant_id} not found")
        if party_size > restaurant.capacity:
            return []

        held = {
            r.table_id for r in self.reservation_repo.find_active_by_restaurant(restaurant_id)
            if r.date == date and r.time == time
        }
        return [t for t in restaurant.tables if t.available and t.id not in held]
