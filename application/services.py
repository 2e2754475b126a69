"""Application Services - Business use cases"""
import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel

from application.store import HotelStore
from domain.entities import Payment, Reservation, Room
from domain.enums import PaymentMethod, PaymentStatus
from domain.errors import (
    CapacityExceeded,
    DuplicateId,
    InvalidDateRange,
    NotFound,
    ReservationConflict,
    UnknownRoom,
    ValidationFailed,
)
from domain.validation import (
    MAX_PARTY_SIZE,
    MIN_PARTY_SIZE,
    is_valid_date_range,
    is_valid_id,
    is_valid_party_size,
)
from domain.value_objects import DateRange, dates_overlap

logger = logging.getLogger(__name__)


def _require_range(start_date: date, end_date: date) -> DateRange:
    if not is_valid_date_range(start_date, end_date):
        raise InvalidDateRange(f"Invalid date range: {start_date} to {end_date} (start must be before end)")
    return DateRange(start=start_date, end=end_date)


class AvailabilityService:
    """Service for room availability queries"""

    def __init__(self, store: HotelStore):
        self.store = store

    def is_room_available(self, room_id: str, start_date: date, end_date: date) -> bool:
        """True iff no reservation on the room overlaps [start_date, end_date)"""
        requested = _require_range(start_date, end_date)

        with self.store.lock:
            if self.store.get_room(room_id) is None:
                raise UnknownRoom(room_id)
            return not any(
                dates_overlap(requested.start, requested.end, r.start_date, r.end_date)
                for r in self.store.list_reservations_for_room(room_id)
            )

    def get_available_rooms(self, start_date: date, end_date: date) -> List[Room]:
        """Rooms free for the whole range, sorted by room number"""
        _require_range(start_date, end_date)

        with self.store.lock:
            return [
                room for room in self.store.list_rooms()
                if self.is_room_available(room.id, start_date, end_date)
            ]


class ReservationService:
    """Service for the reservation lifecycle: book, then optionally cancel"""

    def __init__(self, store: HotelStore, availability: Optional[AvailabilityService] = None):
        self.store = store
        self.availability = availability or AvailabilityService(store)

    def create_reservation(
        self,
        reservation_id: str,
        room_id: str,
        guest_id: str,
        start_date: date,
        end_date: date,
        party_size: int,
    ) -> Reservation:
        """Create new reservation with full validation

        The availability check and the insert happen under the store lock, so
        two bookings for the same room can never interleave between them.
        """
        # Validate input
        if not is_valid_id(reservation_id):
            raise ValidationFailed("Invalid reservation ID format")
        date_range = _require_range(start_date, end_date)
        if not is_valid_party_size(party_size):
            raise ValidationFailed(f"Invalid party size (must be {MIN_PARTY_SIZE}-{MAX_PARTY_SIZE})")

        with self.store.lock:
            room = self.store.get_room(room_id)
            if room is None:
                raise NotFound("Room", room_id)
            guest = self.store.get_guest(guest_id)
            if guest is None:
                raise NotFound("Guest", guest_id)

            if party_size > room.capacity:
                raise CapacityExceeded(party_size, room.capacity)

            if not self.availability.is_room_available(room_id, start_date, end_date):
                raise ReservationConflict(
                    f"Room {room_id} not available from {start_date} to {end_date}"
                )

            if self.store.has_reservation(reservation_id):
                raise DuplicateId("Reservation", reservation_id)

            reservation = Reservation.book(reservation_id, room, guest, date_range, party_size)
            return self.store.insert_reservation(reservation)

    def cancel_reservation(self, reservation_id: str) -> Optional[Reservation]:
        """Cancel a reservation; returns None when the id is unknown"""
        cancelled = self.store.delete_reservation(reservation_id)
        if cancelled is None:
            logger.info("Cancel requested for unknown reservation %s", reservation_id)
        return cancelled

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self.store.get_reservation(reservation_id)

    def list_reservations(self) -> List[Reservation]:
        return self.store.list_reservations()

    def list_reservations_for_room(self, room_id: str) -> List[Reservation]:
        return self.store.list_reservations_for_room(room_id)

    def list_reservations_for_guest(self, guest_id: str) -> List[Reservation]:
        return self.store.list_reservations_for_guest(guest_id)


class PaymentService:
    """Service for recording payments against reservations"""

    def __init__(self, store: HotelStore):
        self.store = store

    def record_payment(
        self,
        payment_id: str,
        reservation_id: str,
        guest_id: str,
        amount: Decimal,
        method: PaymentMethod,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        transaction_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Payment:
        """Record a payment taken at the desk (completed unless told otherwise)"""
        if not is_valid_id(payment_id):
            raise ValidationFailed("Invalid payment ID format")
        if not amount.is_finite():
            raise ValidationFailed(f"Invalid payment amount: {amount}")
        if amount < 0:
            raise ValidationFailed("Payment amount cannot be negative")

        payment = Payment(
            id=payment_id,
            reservation_id=reservation_id,
            guest_id=guest_id,
            amount=amount,
            method=method,
            status=status,
            transaction_id=transaction_id,
            description=description,
        )
        return self.store.add_payment(payment)

    def total_for_reservation(self, reservation_id: str) -> Decimal:
        return self.store.total_payments_for_reservation(reservation_id)


class OccupancyReport(BaseModel):
    """Read-only occupancy aggregate over a closed date period"""
    period_start: date
    period_end: date
    total_rooms: int
    total_reservations: int
    total_guests: int
    total_payments: int
    occupied_room_days: int
    total_room_days: int
    occupancy_rate: Decimal
    generated_at: datetime

    @property
    def report_period(self) -> str:
        return f"{self.period_start} to {self.period_end}"

    @property
    def formatted_rate(self) -> str:
        return f"{self.occupancy_rate:.2f}%"


class SystemStatistics(BaseModel):
    total_rooms: int
    total_guests: int
    vip_guests: int
    total_reservations: int
    active_reservations: int
    total_payments: int
    completed_revenue: Decimal


class ReportingService:
    """Service for derived, read-only aggregates"""

    def __init__(self, store: HotelStore):
        self.store = store

    def generate_occupancy_report(self, start_date: date, end_date: date) -> OccupancyReport:
        """Occupancy over the closed period [start_date, end_date]

        A reservation counts when it touches the period at all (both ends
        inclusive, unlike booking conflicts) and contributes every night of its
        own stay. A period with no rooms or no days reports 0.
        """
        with self.store.lock:
            rooms = self.store.list_rooms()
            reservations = self.store.list_reservations()
            total_guests = len(self.store.list_guests())
            total_payments = len(self.store.list_payments())

        in_period = [r for r in reservations if r.date_range.intersects_inclusive(start_date, end_date)]

        days_in_period = max(0, (end_date - start_date).days + 1)
        total_room_days = len(rooms) * days_in_period
        occupied_room_days = sum(r.nights() for r in in_period)

        if total_room_days > 0:
            rate = Decimal(occupied_room_days) * 100 / Decimal(total_room_days)
        else:
            rate = Decimal("0")

        return OccupancyReport(
            period_start=start_date,
            period_end=end_date,
            total_rooms=len(rooms),
            total_reservations=len(in_period),
            total_guests=total_guests,
            total_payments=total_payments,
            occupied_room_days=occupied_room_days,
            total_room_days=total_room_days,
            occupancy_rate=rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            generated_at=datetime.now().replace(microsecond=0),
        )

    def system_statistics(self) -> SystemStatistics:
        with self.store.lock:
            today = self.store.today()
            reservations = self.store.list_reservations()
            payments = self.store.list_payments()

            return SystemStatistics(
                total_rooms=len(self.store.list_rooms()),
                total_guests=len(self.store.list_guests()),
                vip_guests=len(self.store.list_vip_guests()),
                total_reservations=len(reservations),
                active_reservations=sum(1 for r in reservations if r.is_active_on(today)),
                total_payments=len(payments),
                completed_revenue=sum((p.amount for p in payments if p.is_completed), Decimal("0")),
            )
