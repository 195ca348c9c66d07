"""Offline stand-ins for the postal directory and geocoder."""

from __future__ import annotations

import csv
from pathlib import Path

from manifest_reconciler.common.models import GeoPoint, PostalRecord

MANIFEST_HEADER = [
    "Sequence",
    "Stop",
    "Destination Address",
    "Zipcode/Postal code",
    "Bairro",
    "City",
    "Latitude",
    "Longitude",
]


class FakePostalLookup:
    def __init__(self, records: dict[str, PostalRecord] | None = None, reverse: dict[str, PostalRecord] | None = None):
        self.records = records or {}
        self.reverse = reverse or {}
        self.forward_calls: list[str] = []

    def lookup_postal_code(self, code):
        self.forward_calls.append(code)
        return self.records.get(code)

    def reverse_lookup_street(self, street_name, city):
        return self.reverse.get(street_name)


class FakeGeocoder:
    def __init__(self, points: dict[tuple[str, str], GeoPoint] | None = None):
        self.points = points or {}
        self.calls: list[tuple] = []

    def geocode(self, street, number, neighborhood, city):
        self.calls.append((street, number, neighborhood, city))
        return self.points.get((street, number))


def write_manifest(path: Path, rows: list[list[str]], header: list[str] | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header or MANIFEST_HEADER)
        writer.writerows(rows)
    return path


def read_rows(path: Path) -> tuple[list[str], list[dict]]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return list(reader.fieldnames or []), list(reader)
