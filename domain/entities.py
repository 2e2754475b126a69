"""Domain Entities

Field aliases (camelCase) are the JSON contract of the persisted files.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from domain.enums import PaymentMethod, PaymentStatus
from domain.errors import InvalidGuest, ValidationFailed
from domain.validation import (
    is_valid_capacity,
    is_valid_id,
    is_valid_room_number,
    validate_guest,
)
from domain.value_objects import DateRange

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _now() -> datetime:
    # second precision, the resolution of the persisted timestamp
    return datetime.now().replace(microsecond=0)


def _require_text(value: str, label: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{label} required")
    return value


class Entity(BaseModel):
    """Base for persisted records"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """JSON-ready dict keyed by the persisted field names"""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: dict):
        return cls.model_validate(record)


class Room(Entity):
    """Room Entity, immutable once created"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    number: str
    capacity: int = Field(gt=0)

    @field_validator("id", "number")
    @classmethod
    def not_blank(cls, v, info):
        return _require_text(v, info.field_name)

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(room_id: str, number: str, capacity: int) -> "Room":
        """Create new room applying the front-desk shape rules"""
        if not is_valid_id(room_id):
            raise ValidationFailed("Invalid room ID format")
        if not is_valid_room_number(number):
            raise ValidationFailed("Invalid room number format")
        if not is_valid_capacity(capacity):
            raise ValidationFailed("Invalid capacity (must be 1-10)")
        return Room(id=room_id.strip(), number=number.strip(), capacity=capacity)

    def __str__(self) -> str:
        return f"Room {self.number} (id={self.id}, capacity={self.capacity})"


class Guest(Entity):
    """Guest Entity

    VIP status and contact fields can change; everything else is fixed at
    registration.
    """

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    registration_date: date = Field(default_factory=date.today)
    vip_status: bool = False

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v):
        return _require_text(v, "id")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        guest_id: str,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
        address: Optional[str] = None,
        date_of_birth: Optional[date] = None,
    ) -> "Guest":
        """Register a new guest with validation"""
        if not is_valid_id(guest_id):
            raise ValidationFailed("Invalid guest ID format")
        result = validate_guest(first_name, last_name, email, phone)
        if not result.valid:
            raise InvalidGuest(f"Invalid guest data: {result.error_message}")

        return Guest(
            id=guest_id.strip(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            address=address,
            date_of_birth=date_of_birth,
        )

    # ==================== MODIFICATION METHODS ====================
    def set_vip_status(self, vip_status: bool) -> None:
        self.vip_status = vip_status

    def update_contact(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> None:
        """Replace the given contact fields, leaving the others untouched"""
        if email is not None:
            self.email = email.strip()
        if phone is not None:
            self.phone = phone.strip()
        if address is not None:
            self.address = address

    def __str__(self) -> str:
        vip = " [VIP]" if self.vip_status else ""
        return f"{self.full_name} (id={self.id}, email={self.email}, phone={self.phone}){vip}"


class Reservation(Entity):
    """Reservation Entity over [start_date, end_date)

    guest_name is the guest's full name captured at booking time and is only
    for display; guest_id is the reference. Records written before guest_id
    existed carry only the name.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    room_id: str
    guest_id: Optional[str] = None
    guest_name: str
    start_date: date
    end_date: date
    party_size: int = Field(gt=0)

    @field_validator("id", "room_id", "guest_name")
    @classmethod
    def not_blank(cls, v, info):
        return _require_text(v, info.field_name)

    @model_validator(mode="after")
    def start_before_end(self):
        if not self.start_date < self.end_date:
            raise ValueError("startDate must be before endDate")
        return self

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def book(reservation_id: str, room: Room, guest: Guest, date_range: DateRange, party_size: int) -> "Reservation":
        """Build a reservation snapshotting the guest's current name"""
        return Reservation(
            id=reservation_id,
            room_id=room.id,
            guest_id=guest.id,
            guest_name=guest.full_name,
            start_date=date_range.start,
            end_date=date_range.end,
            party_size=party_size,
        )

    # ==================== QUERY METHODS ====================
    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    def overlaps(self, start: date, end: date) -> bool:
        return self.date_range.overlaps(DateRange(start=start, end=end))

    def is_active_on(self, today: date) -> bool:
        """Still running or upcoming: the stay ends after today"""
        return self.end_date > today

    def __str__(self) -> str:
        return (
            f"Reservation {self.id}: room {self.room_id}, {self.guest_name}, "
            f"{self.start_date} to {self.end_date}, party of {self.party_size}"
        )


class Payment(Entity):
    """Payment Entity, immutable after creation"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    reservation_id: str
    guest_id: str
    amount: Decimal = Field(ge=0)
    method: PaymentMethod = Field(alias="paymentMethod")
    status: PaymentStatus = Field(default=PaymentStatus.PENDING, alias="paymentStatus")
    payment_date: datetime = Field(default_factory=_now)
    transaction_id: Optional[str] = None
    description: Optional[str] = None

    @field_validator("id", "reservation_id", "guest_id")
    @classmethod
    def not_blank(cls, v, info):
        return _require_text(v, info.field_name)

    @field_validator("payment_date", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        if isinstance(v, str):
            try:
                return datetime.strptime(v, TIMESTAMP_FORMAT)
            except ValueError:
                # let pydantic try ISO 8601
                return v
        return v

    @field_serializer("payment_date", when_used="json")
    def format_timestamp(self, v: datetime) -> str:
        return v.strftime(TIMESTAMP_FORMAT)

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    def __str__(self) -> str:
        return (
            f"Payment {self.id}: {self.amount} via {self.method.value} "
            f"for reservation {self.reservation_id} [{self.status.value}] "
            f"on {self.payment_date.strftime(TIMESTAMP_FORMAT)}"
        )
