"""
In-memory record collections.

A RecordList is the shared, live collection for one record type. The
simulation and the admin bridge both read and mutate it; only index
assignment is serialised so two concurrent creates never share an index.
Readers that need a stable view take a snapshot() first.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterator, TypeVar

from .models import (
    Account,
    Character,
    ItemInfo,
    MagicInfo,
    MapInfo,
    MonsterInfo,
    UserMagic,
)

T = TypeVar("T")


class RecordList(Generic[T]):
    """
    Live list of records with stable, never-reused indices.

    Indices start at 1 and only ever increase; a deleted record's index is
    not handed out again.
    """

    def __init__(self, factory: Callable[..., T], records: list[T] | None = None) -> None:
        self._factory = factory
        self._records: list[T] = []
        self._last_index = 0
        self._index_lock = threading.Lock()
        for record in records or []:
            self.add(record)

    def __iter__(self) -> Iterator[T]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> list[T]:
        """Copy of the current records; safe to iterate while others mutate."""
        return list(self._records)

    def find(self, index: int) -> T | None:
        for record in self.snapshot():
            if record.index == index:
                return record
        return None

    def find_by(self, predicate: Callable[[T], bool]) -> T | None:
        for record in self.snapshot():
            if predicate(record):
                return record
        return None

    def add(self, record: T) -> T:
        """Adopt an existing record (e.g. loaded from storage) keeping its index."""
        with self._index_lock:
            if any(r.index == record.index for r in self._records):
                raise ValueError(f"Duplicate index {record.index}")
            self._last_index = max(self._last_index, record.index)
            self._records.append(record)
        return record

    def create_new(self, **fields) -> T:
        """Create and append a record with a fresh index."""
        with self._index_lock:
            self._last_index += 1
            record = self._factory(index=self._last_index, **fields)
            self._records.append(record)
        return record

    def delete(self, record: T) -> bool:
        try:
            self._records.remove(record)
        except ValueError:
            return False
        return True


@dataclass
class RecordStore:
    """All record collections the admin bridge works against."""

    accounts: RecordList[Account] = field(default_factory=lambda: RecordList(Account))
    characters: RecordList[Character] = field(
        default_factory=lambda: RecordList(Character)
    )
    items: RecordList[ItemInfo] = field(default_factory=lambda: RecordList(ItemInfo))
    monsters: RecordList[MonsterInfo] = field(
        default_factory=lambda: RecordList(MonsterInfo)
    )
    maps: RecordList[MapInfo] = field(default_factory=lambda: RecordList(MapInfo))
    magics: RecordList[MagicInfo] = field(default_factory=lambda: RecordList(MagicInfo))
    user_magics: RecordList[UserMagic] = field(
        default_factory=lambda: RecordList(UserMagic)
    )

    def find_account(self, email: str) -> Account | None:
        """Case-insensitive lookup by email."""
        wanted = email.casefold()
        return self.accounts.find_by(lambda a: (a.email or "").casefold() == wanted)
