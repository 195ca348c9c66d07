"""Per-run memoization of postal and geocoding lookups."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

from manifest_reconciler.common.models import GeoPoint, PostalRecord
from manifest_reconciler.common.text import normalize_key

V = TypeVar("V")


class MemoTable(Generic[V]):
    """Keyed table that counts hits and keeps the first value stored per key."""

    def __init__(self) -> None:
        self.entries: dict[str, V] = {}
        self.hits = 0
        self.lock = threading.Lock()

    def fetch(self, key: str) -> V | None:
        with self.lock:
            if key not in self.entries:
                return None
            self.hits += 1
            return self.entries[key]

    def store(self, key: str, value: V) -> None:
        with self.lock:
            self.entries.setdefault(key, value)

    def clear(self) -> None:
        with self.lock:
            self.entries.clear()
            self.hits = 0

    def __len__(self) -> int:
        return len(self.entries)


class LookupCache:
    def __init__(self) -> None:
        self.postal: MemoTable[PostalRecord] = MemoTable()
        self.locations: MemoTable[GeoPoint] = MemoTable()

    @property
    def postal_hits(self) -> int:
        return self.postal.hits

    @property
    def location_hits(self) -> int:
        return self.locations.hits

    def clear(self) -> None:
        self.postal.clear()
        self.locations.clear()


def geocode_cache_key(street: str, number: str, postal_code: str, neighborhood: str, city: str) -> str:
    parts = (street, number, postal_code, neighborhood, city)
    return "_".join(normalize_key(part or "") for part in parts)
