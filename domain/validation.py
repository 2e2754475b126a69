"""Input validation predicates

The is_* / has_* predicates are total: they never raise and simply answer
False for None or values of the wrong type.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from domain.errors import ValidationFailed


EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@([A-Za-z0-9.-]+\.[A-Za-z]{2,})$")

# E.164-like, bare 10 digits, or (xxx) xxx-xxxx
PHONE_PATTERN = re.compile(r"^[+]?[1-9]\d{1,14}$|^\d{10}$|^\(\d{3}\)\s?\d{3}-?\d{4}$")

ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
ROOM_NUMBER_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
UNSAFE_CHARACTERS = re.compile(r"[<>\"'&]")

DATE_FORMAT = "%Y-%m-%d"

MIN_CAPACITY = 1
MAX_CAPACITY = 10
MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20
MIN_NAME_LENGTH = 2


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a composite validation, with a human-readable reason"""
    valid: bool
    error_message: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(True)

    @classmethod
    def invalid(cls, message: str) -> "ValidationResult":
        return cls(False, message)

    def __bool__(self) -> bool:
        return self.valid


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_string(value) -> bool:
    """Not None and not blank"""
    return isinstance(value, str) and value.strip() != ""


def has_min_length(value, min_length: int) -> bool:
    return is_valid_string(value) and len(value.strip()) >= min_length


def has_max_length(value, max_length: int) -> bool:
    return isinstance(value, str) and len(value) <= max_length


def is_valid_email(email) -> bool:
    return is_valid_string(email) and EMAIL_PATTERN.match(email.strip()) is not None


def is_valid_phone(phone) -> bool:
    if not is_valid_string(phone):
        return False
    return PHONE_PATTERN.match(re.sub(r"\s", "", phone)) is not None


def is_positive_integer(value) -> bool:
    return _is_int(value) and value > 0


def is_in_range(value, minimum: int, maximum: int) -> bool:
    return _is_int(value) and minimum <= value <= maximum


def is_not_past_date(value, today: Optional[date] = None) -> bool:
    if not isinstance(value, date):
        return False
    return value >= (today or date.today())


def is_valid_date_range(start_date, end_date) -> bool:
    """Start strictly before end"""
    if not isinstance(start_date, date) or not isinstance(end_date, date):
        return False
    return start_date < end_date


def is_valid_room_number(room_number) -> bool:
    return is_valid_string(room_number) and ROOM_NUMBER_PATTERN.match(room_number.strip()) is not None


def is_valid_id(value) -> bool:
    """Alphanumeric with optional hyphens"""
    return is_valid_string(value) and ID_PATTERN.match(value.strip()) is not None


def is_valid_capacity(capacity) -> bool:
    return is_in_range(capacity, MIN_CAPACITY, MAX_CAPACITY)


def is_valid_party_size(party_size) -> bool:
    return is_in_range(party_size, MIN_PARTY_SIZE, MAX_PARTY_SIZE)


def validate_guest(first_name, last_name, email, phone) -> ValidationResult:
    """Validate guest contact details, reporting the first problem found"""
    if not is_valid_string(first_name):
        return ValidationResult.invalid("First name is required")
    if not has_min_length(first_name, MIN_NAME_LENGTH):
        return ValidationResult.invalid(f"First name must be at least {MIN_NAME_LENGTH} characters")
    if not is_valid_string(last_name):
        return ValidationResult.invalid("Last name is required")
    if not has_min_length(last_name, MIN_NAME_LENGTH):
        return ValidationResult.invalid(f"Last name must be at least {MIN_NAME_LENGTH} characters")
    if not is_valid_email(email):
        return ValidationResult.invalid("Valid email address is required")
    if not is_valid_phone(phone):
        return ValidationResult.invalid("Valid phone number is required")
    return ValidationResult.ok()


# ==================== INPUT HELPERS ====================

def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string"""
    if not is_valid_string(value):
        raise ValidationFailed("Date string cannot be empty")
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationFailed(f"Invalid date '{value.strip()}'. Use YYYY-MM-DD")


def sanitize_input(value: Optional[str]) -> str:
    """Trim and drop characters that have no business in ids or names"""
    if value is None:
        return ""
    return UNSAFE_CHARACTERS.sub("", value.strip())
