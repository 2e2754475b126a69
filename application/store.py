"""Hotel Store - authoritative in-memory tables

The store owns one table per entity type plus two secondary indexes
(room id -> reservation ids, guest id -> reservation ids). Indexes are derived
data: they are never persisted and are rebuilt from the tables on load.

Every mutation runs under ``lock`` and is followed by a synchronous rewrite of
the affected collection. A failed write is logged and remembered per
collection in ``persistence_errors`` until that collection saves again, but the
in-memory change is kept: memory stays authoritative and disk catches up on
the next successful save.
"""
import logging
import threading
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Set

from domain.entities import Guest, Payment, Reservation, Room
from domain.errors import (
    DuplicateEmail,
    DuplicateId,
    InvalidGuest,
    NotFound,
    PersistenceFailed,
    RoomInUse,
)
from domain.repositories import HotelRepositories
from domain.validation import validate_guest

logger = logging.getLogger(__name__)

ROOMS = "rooms"
GUESTS = "guests"
RESERVATIONS = "reservations"
PAYMENTS = "payments"


class HotelStore:
    """Tables, indexes and the single lock guarding them"""

    def __init__(self, repositories: HotelRepositories, today: Callable[[], date] = date.today):
        self.repositories = repositories
        self.lock = threading.RLock()
        self.today = today
        self.persistence_errors: Dict[str, PersistenceFailed] = {}
        self.failed_saves = 0

        self._rooms: Dict[str, Room] = {}
        self._guests: Dict[str, Guest] = {}
        self._reservations: Dict[str, Reservation] = {}
        self._payments: Dict[str, Payment] = {}

        self._reservations_by_room: Dict[str, Set[str]] = {}
        self._reservations_by_guest: Dict[str, Set[str]] = {}

    # ==================== ROOM OPERATIONS ====================

    def add_room(self, room: Room) -> Room:
        with self.lock:
            if room.id in self._rooms:
                raise DuplicateId("Room", room.id)

            self._rooms[room.id] = room
            self._reservations_by_room.setdefault(room.id, set())
            self._persist(ROOMS)

        logger.info("Added room: %s", room)
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        with self.lock:
            return self._rooms.get(room_id)

    def list_rooms(self) -> List[Room]:
        """All rooms sorted by room number"""
        with self.lock:
            return sorted(self._rooms.values(), key=lambda r: (r.number, r.id))

    def search_rooms_by_capacity(self, min_capacity: int) -> List[Room]:
        """Rooms holding at least min_capacity guests, smallest first"""
        with self.lock:
            matches = [r for r in self._rooms.values() if r.capacity >= min_capacity]
        return sorted(matches, key=lambda r: (r.capacity, r.number))

    def remove_room(self, room_id: str) -> bool:
        """Delete a room unless a reservation on it ends after today"""
        with self.lock:
            today = self.today()
            if any(r.is_active_on(today) for r in self._bucket_reservations(self._reservations_by_room, room_id)):
                raise RoomInUse(room_id)

            removed = self._rooms.pop(room_id, None)
            if removed is None:
                return False

            self._reservations_by_room.pop(room_id, None)
            self._persist(ROOMS)

        logger.info("Removed room: %s", removed)
        return True

    # ==================== GUEST OPERATIONS ====================

    def add_guest(self, guest: Guest) -> Guest:
        self._validate_guest_shape(guest)

        with self.lock:
            if guest.id in self._guests:
                raise DuplicateId("Guest", guest.id)
            if self._email_taken(guest.email):
                raise DuplicateEmail(guest.email)

            self._guests[guest.id] = guest.model_copy()
            self._reservations_by_guest.setdefault(guest.id, set())
            self._persist(GUESTS)

        logger.info("Added guest: %s", guest)
        return guest.model_copy()

    def get_guest(self, guest_id: str) -> Optional[Guest]:
        """Snapshot of the guest; change it through update_guest"""
        with self.lock:
            guest = self._guests.get(guest_id)
            return guest.model_copy() if guest else None

    def list_guests(self) -> List[Guest]:
        """All guests sorted by last name, then first name"""
        with self.lock:
            guests = [g.model_copy() for g in self._guests.values()]
        return sorted(guests, key=lambda g: (g.last_name, g.first_name, g.id))

    def search_guests_by_name(self, name: str) -> List[Guest]:
        """Case-insensitive substring match against the full name"""
        term = (name or "").strip().lower()
        with self.lock:
            matches = [g.model_copy() for g in self._guests.values() if term in g.full_name.lower()]
        return sorted(matches, key=lambda g: (g.last_name, g.first_name, g.id))

    def list_vip_guests(self) -> List[Guest]:
        with self.lock:
            vips = [g.model_copy() for g in self._guests.values() if g.vip_status]
        return sorted(vips, key=lambda g: (g.last_name, g.first_name, g.id))

    def update_guest(self, guest: Guest) -> Guest:
        """Replace a stored guest wholesale"""
        self._validate_guest_shape(guest)

        with self.lock:
            if guest.id not in self._guests:
                raise NotFound("Guest", guest.id)
            if self._email_taken(guest.email, exclude_id=guest.id):
                raise DuplicateEmail(guest.email)

            self._guests[guest.id] = guest.model_copy()
            self._persist(GUESTS)

        logger.info("Updated guest: %s", guest)
        return guest.model_copy()

    # ==================== RESERVATION TABLE ====================

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        with self.lock:
            return self._reservations.get(reservation_id)

    def has_reservation(self, reservation_id: str) -> bool:
        with self.lock:
            return reservation_id in self._reservations

    def list_reservations(self) -> List[Reservation]:
        """All reservations sorted by start date"""
        with self.lock:
            return _by_start_date(self._reservations.values())

    def list_reservations_for_room(self, room_id: str) -> List[Reservation]:
        with self.lock:
            return _by_start_date(self._bucket_reservations(self._reservations_by_room, room_id))

    def list_reservations_for_guest(self, guest_id: str) -> List[Reservation]:
        with self.lock:
            return _by_start_date(self._bucket_reservations(self._reservations_by_guest, guest_id))

    def insert_reservation(self, reservation: Reservation) -> Reservation:
        """Add a reservation that the caller has already checked for conflicts"""
        with self.lock:
            if reservation.id in self._reservations:
                raise DuplicateId("Reservation", reservation.id)

            self._reservations[reservation.id] = reservation
            self._reservations_by_room.setdefault(reservation.room_id, set()).add(reservation.id)
            guest_id = self._resolve_guest_id(reservation)
            if guest_id is not None:
                self._reservations_by_guest.setdefault(guest_id, set()).add(reservation.id)
            self._persist(RESERVATIONS)

        logger.info("Created reservation: %s", reservation)
        return reservation

    def delete_reservation(self, reservation_id: str) -> Optional[Reservation]:
        """Remove a reservation and its index entries; None when absent"""
        with self.lock:
            reservation = self._reservations.pop(reservation_id, None)
            if reservation is None:
                return None

            self._reservations_by_room.get(reservation.room_id, set()).discard(reservation_id)
            guest_id = self._resolve_guest_id(reservation)
            if guest_id is not None:
                self._reservations_by_guest.get(guest_id, set()).discard(reservation_id)
            self._persist(RESERVATIONS)

        logger.info("Cancelled reservation: %s", reservation)
        return reservation

    # ==================== PAYMENT OPERATIONS ====================

    def add_payment(self, payment: Payment) -> Payment:
        with self.lock:
            if payment.id in self._payments:
                raise DuplicateId("Payment", payment.id)
            if payment.reservation_id not in self._reservations:
                raise NotFound("Reservation", payment.reservation_id)
            if payment.guest_id not in self._guests:
                raise NotFound("Guest", payment.guest_id)

            self._payments[payment.id] = payment
            self._persist(PAYMENTS)

        logger.info("Added payment: %s", payment)
        return payment

    def list_payments(self) -> List[Payment]:
        with self.lock:
            return _by_payment_date(self._payments.values())

    def list_payments_for_reservation(self, reservation_id: str) -> List[Payment]:
        with self.lock:
            return _by_payment_date(p for p in self._payments.values() if p.reservation_id == reservation_id)

    def list_payments_for_guest(self, guest_id: str) -> List[Payment]:
        with self.lock:
            return _by_payment_date(p for p in self._payments.values() if p.guest_id == guest_id)

    def total_payments_for_reservation(self, reservation_id: str) -> Decimal:
        """Exact sum of the completed payments for a reservation"""
        return sum(
            (p.amount for p in self.list_payments_for_reservation(reservation_id) if p.is_completed),
            Decimal("0"),
        )

    # ==================== LOADING AND INDEXES ====================

    def load(self) -> None:
        """Replace every table with the persisted collections and rebuild indexes"""
        with self.lock:
            self._rooms = {r.id: r for r in self._load_collection(ROOMS)}
            self._guests = {g.id: g for g in self._load_collection(GUESTS)}
            self._reservations = {r.id: r for r in self._load_collection(RESERVATIONS)}
            self._payments = {p.id: p for p in self._load_collection(PAYMENTS)}
            self.rebuild_indexes()

        logger.info(
            "Loaded %d rooms, %d guests, %d reservations, %d payments",
            len(self._rooms), len(self._guests), len(self._reservations), len(self._payments),
        )

    def rebuild_indexes(self) -> None:
        """Recompute both reservation indexes from the tables"""
        with self.lock:
            self._reservations_by_room = {room_id: set() for room_id in self._rooms}
            self._reservations_by_guest = {guest_id: set() for guest_id in self._guests}

            for reservation in self._reservations.values():
                self._reservations_by_room.setdefault(reservation.room_id, set()).add(reservation.id)
                guest_id = self._resolve_guest_id(reservation)
                if guest_id is not None:
                    self._reservations_by_guest.setdefault(guest_id, set()).add(reservation.id)

    def room_index(self) -> Dict[str, Set[str]]:
        """Copy of the room -> reservation ids index"""
        with self.lock:
            return {k: set(v) for k, v in self._reservations_by_room.items()}

    def guest_index(self) -> Dict[str, Set[str]]:
        """Copy of the guest -> reservation ids index"""
        with self.lock:
            return {k: set(v) for k, v in self._reservations_by_guest.items()}

    @property
    def last_persistence_error(self) -> Optional[PersistenceFailed]:
        """Most recent save failure of a collection that has not saved since"""
        with self.lock:
            if not self.persistence_errors:
                return None
            return list(self.persistence_errors.values())[-1]

    # ==================== PRIVATE HELPERS ====================

    def _resolve_guest_id(self, reservation: Reservation) -> Optional[str]:
        if reservation.guest_id:
            return reservation.guest_id
        # records written before guest ids were stored: match on the captured name
        for guest in self._guests.values():
            if guest.full_name == reservation.guest_name:
                return guest.id
        return None

    def _bucket_reservations(self, index: Dict[str, Set[str]], key: str) -> List[Reservation]:
        ids = index.get(key, set())
        return [self._reservations[i] for i in ids if i in self._reservations]

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        wanted = email.strip().lower()
        return any(
            g.email.strip().lower() == wanted
            for g in self._guests.values()
            if g.id != exclude_id
        )

    @staticmethod
    def _validate_guest_shape(guest: Guest) -> None:
        result = validate_guest(guest.first_name, guest.last_name, guest.email, guest.phone)
        if not result.valid:
            raise InvalidGuest(f"Invalid guest data: {result.error_message}")

    def _tables(self) -> Dict[str, dict]:
        return {
            ROOMS: self._rooms,
            GUESTS: self._guests,
            RESERVATIONS: self._reservations,
            PAYMENTS: self._payments,
        }

    def _persist(self, collection: str) -> None:
        repository = getattr(self.repositories, collection)
        try:
            repository.save_all(list(self._tables()[collection].values()))
            self.persistence_errors.pop(collection, None)
        except PersistenceFailed as e:
            self.persistence_errors.pop(collection, None)
            self.persistence_errors[collection] = e
            self.failed_saves += 1
            logger.error("Failed to save %s, keeping in-memory change: %s", collection, e)

    def _load_collection(self, collection: str) -> list:
        repository = getattr(self.repositories, collection)
        try:
            return repository.load_all()
        except PersistenceFailed as e:
            logger.warning("Could not load %s, starting empty: %s", collection, e)
            return []


def _by_start_date(reservations) -> List[Reservation]:
    return sorted(reservations, key=lambda r: (r.start_date, r.id))


def _by_payment_date(payments) -> List[Payment]:
    return sorted(payments, key=lambda p: (p.payment_date, p.id))
