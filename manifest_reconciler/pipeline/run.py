"""Run one manifest through reconciliation and write its outputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from manifest_reconciler.common.cache import LookupCache
from manifest_reconciler.common.config_loader import ConfigBundle
from manifest_reconciler.common.fs import write_csv
from manifest_reconciler.common.logging import log_event
from manifest_reconciler.pipeline.frequency import FrequencyAggregator
from manifest_reconciler.pipeline.manifest import output_header, read_manifest, serialize_row
from manifest_reconciler.pipeline.reconcile import (
    STREET_MATCHED,
    STREET_REVERSE_LOOKUP,
    Geocoder,
    PostalLookup,
    RowReconciler,
)
from manifest_reconciler.pipeline.reports import write_report, write_run_summary

STAGE = "run"


@dataclass
class RunStats:
    rows_in: int = 0
    rows_written: int = 0
    rows_dropped: int = 0
    postal_misses: int = 0
    streets_matched: int = 0
    streets_reverse_corrected: int = 0
    geocoded: int = 0

    def to_dict(self) -> dict[str, int]:
        return dict(sorted(vars(self).items()))


@dataclass
class RunResult:
    output_path: Path
    report_path: Path
    summary_path: Path | None
    stats: RunStats
    cache_hits: dict[str, int] = field(default_factory=dict)


def _reconciled_rows(
    rows: Iterator[dict[str, str]],
    reconciler: RowReconciler,
    header: list[str],
    integer_fields: list[str],
    stats: RunStats,
) -> Iterator[dict]:
    for row in rows:
        stats.rows_in += 1
        outcome = reconciler.reconcile(row)
        if outcome is None:
            stats.rows_dropped += 1
            continue
        if not outcome.postal_hit:
            stats.postal_misses += 1
        if outcome.street_correction == STREET_MATCHED:
            stats.streets_matched += 1
        elif outcome.street_correction == STREET_REVERSE_LOOKUP:
            stats.streets_reverse_corrected += 1
        if outcome.geocoded:
            stats.geocoded += 1
        yield serialize_row(outcome.row, header, integer_fields)


def run_manifest(
    input_path: Path,
    output_path: Path,
    report_path: Path,
    bundle: ConfigBundle,
    postal_lookup: PostalLookup,
    geocoder: Geocoder,
    *,
    run_id: str,
    run_date: str,
    summary_path: Path | None = None,
    logger: logging.Logger | None = None,
) -> RunResult:
    logger = logger or logging.getLogger(__name__)
    fields = bundle.fields
    log_event(logger, f"starting file processing: {input_path}", run_id=run_id, stage=STAGE, event="RUN_START")

    cache = LookupCache()
    frequencies = FrequencyAggregator(bundle.report["alley_prefixes"])
    reconciler = RowReconciler(postal_lookup, geocoder, cache, frequencies, fields, logger=logger)
    stats = RunStats()

    integer_fields = [fields["sequence"], fields["stop"]]
    with read_manifest(input_path) as (input_header, rows):
        header = output_header(input_header, fields["address"], fields["complement"])
        stats.rows_written = write_csv(
            output_path,
            header,
            _reconciled_rows(rows, reconciler, header, integer_fields, stats),
        )

    address_lines, street_lines, alley_lines = frequencies.report_sections(int(bundle.report["top_n"]))
    write_report(report_path, address_lines, street_lines, alley_lines, bundle.report.get("headings"))

    cache_hits = {"postal": cache.postal_hits, "location": cache.location_hits}
    if summary_path is not None:
        write_run_summary(summary_path, run_id, run_date, stats.to_dict(), cache_hits)

    log_event(
        logger,
        f"geolocation cache was used {cache.location_hits} times and the postal code cache "
        f"was used {cache.postal_hits} times",
        run_id=run_id,
        stage=STAGE,
        event="CACHE_HITS",
    )
    log_event(
        logger,
        f"processing completed, file saved as: {output_path.name}",
        run_id=run_id,
        stage=STAGE,
        event="RUN_END",
        status="ok",
        rows_in=stats.rows_in,
        rows_out=stats.rows_written,
    )
    cache.clear()

    return RunResult(
        output_path=output_path,
        report_path=report_path,
        summary_path=summary_path,
        stats=stats,
        cache_hits=cache_hits,
    )
