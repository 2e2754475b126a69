"""In-Memory Repository Implementations"""
from typing import Generic, List, Optional, TypeVar

from domain.errors import PersistenceFailed
from domain.repositories import CollectionRepository, HotelRepositories

T = TypeVar("T")


class InMemoryRepository(CollectionRepository[T], Generic[T]):
    """In-memory implementation of CollectionRepository

    Keeps the last saved collection. Setting fail_on_save / fail_on_load makes
    the repository behave like an unreachable disk.
    """

    def __init__(self, items: Optional[List[T]] = None):
        self._storage: List[T] = list(items or [])
        self.save_count = 0
        self.fail_on_save = False
        self.fail_on_load = False

    def load_all(self) -> List[T]:
        """Return a copy of the stored collection"""
        if self.fail_on_load:
            raise PersistenceFailed("In-memory repository is unreadable")
        return list(self._storage)

    def save_all(self, items: List[T]) -> None:
        """Replace the stored collection"""
        if self.fail_on_save:
            raise PersistenceFailed("In-memory repository is unwritable")
        self._storage = list(items)
        self.save_count += 1

    @property
    def stored(self) -> List[T]:
        return list(self._storage)


def in_memory_repositories() -> HotelRepositories:
    """A fresh, empty set of in-memory repositories"""
    return HotelRepositories(
        rooms=InMemoryRepository(),
        guests=InMemoryRepository(),
        reservations=InMemoryRepository(),
        payments=InMemoryRepository(),
    )
