"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PostalRecord:
    street_name: str
    city: str
    neighborhood: str | None = None
    state: str | None = None
    postal_code: str | None = None


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class AddressParts:
    street: str
    number: str
    complement: str | None


@dataclass
class FrequencyBucket:
    count: int = 0
    sequence_numbers: list[int] = field(default_factory=list)

    def add(self, sequence_number: int) -> None:
        self.sequence_numbers.append(sequence_number)
        self.count = len(self.sequence_numbers)
