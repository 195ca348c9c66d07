"""Per-row reconciliation: postal lookup, street correction, geocoding, complement split."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from manifest_reconciler.common.address import (
    replace_street_segment,
    split_address,
    street_and_number,
    street_segment,
)
from manifest_reconciler.common.cache import LookupCache, geocode_cache_key
from manifest_reconciler.common.logging import log_event, log_warning
from manifest_reconciler.common.models import GeoPoint, PostalRecord
from manifest_reconciler.common.postcode import normalise_postal_code
from manifest_reconciler.common.street_match import clean_street_name, street_name_matches
from manifest_reconciler.pipeline.frequency import FrequencyAggregator
from manifest_reconciler.pipeline.manifest import to_int

STAGE = "reconcile"

STREET_MATCHED = "matched"
STREET_REVERSE_LOOKUP = "reverse_lookup"
STREET_UNCHANGED = "unchanged"


class PostalLookup(Protocol):
    def lookup_postal_code(self, code: str) -> PostalRecord | None: ...

    def reverse_lookup_street(self, street_name: str, city: str) -> PostalRecord | None: ...


class Geocoder(Protocol):
    def geocode(self, street: str, number: str, neighborhood: str, city: str) -> GeoPoint | None: ...


@dataclass(frozen=True)
class RowOutcome:
    row: dict
    postal_code: str
    postal_hit: bool
    street_correction: str | None
    geocoded: bool


class RowReconciler:
    def __init__(
        self,
        postal_lookup: PostalLookup,
        geocoder: Geocoder,
        cache: LookupCache,
        frequencies: FrequencyAggregator,
        fields: dict[str, str],
        logger: logging.Logger | None = None,
    ) -> None:
        self.postal_lookup = postal_lookup
        self.geocoder = geocoder
        self.cache = cache
        self.frequencies = frequencies
        self.fields = fields
        self.logger = logger or logging.getLogger(__name__)

    def _field(self, row: dict, name: str) -> str:
        value = row.get(self.fields[name])
        return "" if value is None else str(value)

    def fetch_postal_record(self, postal_code: str) -> PostalRecord | None:
        cached = self.cache.postal.fetch(postal_code)
        if cached is not None:
            return cached
        record = self.postal_lookup.lookup_postal_code(postal_code)
        if record is not None:
            self.cache.postal.store(postal_code, record)
        return record

    def fetch_location(
        self, street: str, number: str, postal_code: str, neighborhood: str, city: str
    ) -> GeoPoint | None:
        key = geocode_cache_key(street, number, postal_code, neighborhood, city)
        cached = self.cache.locations.fetch(key)
        if cached is not None:
            return cached
        location = self.geocoder.geocode(street, number, neighborhood, city)
        if location is not None:
            self.cache.locations.store(key, location)
        return location

    def correct_street(self, address: str, record: PostalRecord) -> tuple[str, str]:
        input_street = street_segment(address)
        if street_name_matches(input_street, record.street_name):
            return replace_street_segment(address, record.street_name), STREET_MATCHED

        log_warning(
            self.logger,
            f"trying to correct street name: {input_street}",
            stage=STAGE,
            event="STREET_MISMATCH",
            status="warning",
        )
        street_info = self.postal_lookup.reverse_lookup_street(clean_street_name(input_street), record.city)
        if street_info is not None and street_info.street_name:
            return replace_street_segment(address, street_info.street_name), STREET_REVERSE_LOOKUP
        return address, STREET_UNCHANGED

    def geocode_row(self, row: dict, postal_code: str) -> bool:
        street, number = street_and_number(self._field(row, "address"))
        if street is None or number is None:
            return False

        location = self.fetch_location(
            street,
            number,
            postal_code,
            self._field(row, "neighborhood"),
            self._field(row, "city"),
        )
        if location is None:
            return False

        row[self.fields["latitude"]] = str(location.lat)
        row[self.fields["longitude"]] = str(location.lng)
        return True

    def split_complement(self, row: dict) -> None:
        split = split_address(self._field(row, "address"))
        row[self.fields["address"]] = split.main_address
        row[self.fields["complement"]] = split.complement or ""

    def record_frequencies(self, row: dict) -> None:
        sequence = to_int(row.get(self.fields["sequence"]))
        self.frequencies.record_address(self._field(row, "address"), sequence)

    def reconcile(self, row: dict) -> RowOutcome | None:
        """Reconcile one manifest row in place; None means the row is dropped."""
        postal_code = normalise_postal_code(row.get(self.fields["postal_code"]))
        if postal_code is None:
            return None

        log_event(self.logger, f"processing postal code: {postal_code}", stage=STAGE, postal_code=postal_code)
        record = self.fetch_postal_record(postal_code)

        correction = None
        if record is None:
            log_warning(
                self.logger,
                f"postal code not found: {postal_code}",
                stage=STAGE,
                event="POSTAL_MISS",
                status="miss",
                postal_code=postal_code,
            )
        else:
            log_event(self.logger, f"address found: {record.street_name}", stage=STAGE, postal_code=postal_code)
            corrected, correction = self.correct_street(self._field(row, "address"), record)
            row[self.fields["address"]] = corrected

        geocoded = self.geocode_row(row, postal_code)
        self.split_complement(row)
        self.record_frequencies(row)

        return RowOutcome(
            row=row,
            postal_code=postal_code,
            postal_hit=record is not None,
            street_correction=correction,
            geocoded=geocoded,
        )
