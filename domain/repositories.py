"""Domain Repository Interfaces

A repository persists one whole collection at a time: the store loads every
record on startup and rewrites the full collection after each mutation.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, List, TypeVar

from domain.entities import Guest, Payment, Reservation, Room

T = TypeVar("T")


class CollectionRepository(ABC, Generic[T]):
    """Repository interface for one entity collection"""

    @abstractmethod
    def load_all(self) -> List[T]:
        """Load every stored record; an absent collection is empty.

        Raises PersistenceFailed when the backing store cannot be read or decoded.
        """
        pass

    @abstractmethod
    def save_all(self, items: List[T]) -> None:
        """Replace the stored collection with items.

        Raises PersistenceFailed when the backing store cannot be written.
        """
        pass


@dataclass
class HotelRepositories:
    """The four collections backing a HotelStore"""
    rooms: CollectionRepository[Room]
    guests: CollectionRepository[Guest]
    reservations: CollectionRepository[Reservation]
    payments: CollectionRepository[Payment]
