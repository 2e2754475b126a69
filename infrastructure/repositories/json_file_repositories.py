"""JSON File Repository Implementations

Each collection lives in its own file as an indented JSON array of records.
"""
import json
import logging
from pathlib import Path
from typing import Generic, List, Type, TypeVar, Union

from pydantic import ValidationError

from domain.entities import Entity, Guest, Payment, Reservation, Room
from domain.errors import PersistenceFailed
from domain.repositories import CollectionRepository, HotelRepositories

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)

ROOMS_FILE = "rooms.json"
GUESTS_FILE = "guests.json"
RESERVATIONS_FILE = "reservations.json"
PAYMENTS_FILE = "payments.json"

COLLECTION_FILES = (ROOMS_FILE, GUESTS_FILE, RESERVATIONS_FILE, PAYMENTS_FILE)


class JsonFileRepository(CollectionRepository[E], Generic[E]):
    """File-backed implementation of CollectionRepository"""

    def __init__(self, path: Union[str, Path], entity_type: Type[E]):
        self.path = Path(path)
        self.entity_type = entity_type

    def load_all(self) -> List[E]:
        """Read and decode the file; a missing file is an empty collection"""
        if not self.path.exists():
            logger.info("File %s does not exist, returning empty list", self.path)
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                records = json.load(f)
            if not isinstance(records, list):
                raise PersistenceFailed(f"{self.path} does not contain a JSON array", str(self.path))
            items = [self.entity_type.from_record(record) for record in records]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.error("Failed to load objects from %s: %s", self.path, e)
            raise PersistenceFailed(f"Failed to load {self.path}: {e}", str(self.path)) from e

        logger.info("Successfully loaded %d objects from %s", len(items), self.path)
        return items

    def save_all(self, items: List[E]) -> None:
        """Rewrite the whole file, creating parent directories as needed"""
        records = [item.to_record() for item in items]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Failed to save objects to %s: %s", self.path, e)
            raise PersistenceFailed(f"Failed to save {self.path}: {e}", str(self.path)) from e

        logger.info("Successfully saved %d objects to %s", len(records), self.path)


def json_file_repositories(data_dir: Union[str, Path]) -> HotelRepositories:
    """Repositories for the four collection files under data_dir"""
    data_dir = Path(data_dir)
    return HotelRepositories(
        rooms=JsonFileRepository(data_dir / ROOMS_FILE, Room),
        guests=JsonFileRepository(data_dir / GUESTS_FILE, Guest),
        reservations=JsonFileRepository(data_dir / RESERVATIONS_FILE, Reservation),
        payments=JsonFileRepository(data_dir / PAYMENTS_FILE, Payment),
    )
