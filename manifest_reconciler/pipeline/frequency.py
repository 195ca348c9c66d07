"""Per-address and per-street occurrence counts for the top-N report."""

from __future__ import annotations

from typing import Iterable

from manifest_reconciler.common.deterministic import stable_sorted
from manifest_reconciler.common.models import FrequencyBucket

DEFAULT_ALLEY_PREFIXES = ("Travessa", "Passagem")


def record(buckets: dict[str, FrequencyBucket], key: str, sequence_number: int) -> FrequencyBucket:
    bucket = buckets.get(key)
    if bucket is None:
        bucket = FrequencyBucket()
        buckets[key] = bucket
    bucket.add(sequence_number)
    return bucket


def pluralize(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def render_line(key: str, bucket: FrequencyBucket) -> str:
    sequences = ", ".join(str(seq) for seq in bucket.sequence_numbers)
    return (
        f"{bucket.count} {pluralize(bucket.count, 'pacote', 'pacotes')} na {key}, "
        f"com {pluralize(len(bucket.sequence_numbers), 'a ordem', 'as ordens')} {sequences}"
    )


def top_n(buckets: dict[str, FrequencyBucket], n: int) -> list[str]:
    ranked = stable_sorted(buckets.items(), key=lambda item: -item[1].count)
    return [render_line(key, bucket) for key, bucket in ranked[: max(n, 0)]]


def filter_by_prefix(buckets: dict[str, FrequencyBucket], prefixes: Iterable[str]) -> dict[str, FrequencyBucket]:
    prefixes = tuple(prefixes)
    return {key: bucket for key, bucket in buckets.items() if key.startswith(prefixes)}


class FrequencyAggregator:
    def __init__(self, alley_prefixes: Iterable[str] = DEFAULT_ALLEY_PREFIXES) -> None:
        self.addresses: dict[str, FrequencyBucket] = {}
        self.streets: dict[str, FrequencyBucket] = {}
        self.alley_prefixes = tuple(alley_prefixes)

    def record_address(self, address: str, sequence_number: int) -> None:
        record(self.addresses, address, sequence_number)
        record(self.streets, address.split(",", 1)[0], sequence_number)

    def alley_buckets(self) -> dict[str, FrequencyBucket]:
        return filter_by_prefix(self.streets, self.alley_prefixes)

    def report_sections(self, n: int) -> tuple[list[str], list[str], list[str]]:
        return (
            top_n(self.addresses, n),
            top_n(self.streets, n),
            top_n(self.alley_buckets(), n),
        )
