"""Domain Errors

Every failure the core reports to its callers is a subclass of HotelError.
Validation and lookup failures also subclass the matching builtin so callers
catching ValueError / LookupError keep working.
"""
from typing import Optional


class HotelError(Exception):
    """Base class for all hotel domain failures"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(HotelError, ValueError):
    """Malformed input shape (id, date, capacity, email, phone, ...)"""


class InvalidGuest(ValidationFailed):
    """Guest name/email/phone failed shape validation"""


class InvalidDateRange(ValidationFailed):
    """Start date is not strictly before end date"""


class DuplicateId(HotelError):
    """An entity with the same id already exists"""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} with ID {entity_id} already exists")
        self.entity = entity
        self.entity_id = entity_id


class DuplicateEmail(HotelError):
    """Another guest already uses this email (case-insensitive)"""

    def __init__(self, email: str):
        super().__init__(f"Guest with email {email} already exists")
        self.email = email


class NotFound(HotelError, LookupError):
    """A referenced room, guest or reservation does not exist"""

    def __init__(self, entity: str, entity_id: Optional[str]):
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class UnknownRoom(NotFound):
    def __init__(self, room_id: Optional[str]):
        super().__init__("Room", room_id)


class CapacityExceeded(HotelError):
    def __init__(self, party_size: int, capacity: int):
        super().__init__(f"Party size {party_size} exceeds room capacity {capacity}")
        self.party_size = party_size
        self.capacity = capacity


class ReservationConflict(HotelError):
    """Requested dates overlap an existing reservation on the room"""


class RoomInUse(HotelError):
    """Room still has a reservation ending in the future"""

    def __init__(self, room_id: str):
        super().__init__(f"Cannot remove room {room_id} with active reservations")
        self.room_id = room_id


class PersistenceFailed(HotelError):
    """Reading or writing the backing store failed"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
