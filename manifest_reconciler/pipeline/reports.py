"""Frequency report and run summary output."""

from __future__ import annotations

from pathlib import Path

from manifest_reconciler.common.constants import REPORT_SEPARATOR
from manifest_reconciler.common.fs import write_json, write_text

DEFAULT_HEADINGS = {
    "addresses": "Endereços com mais pedidos:",
    "streets": "Ruas com mais pedidos:",
    "alleys": "Travessas e/ou Passagens com mais pedidos:",
}


def render_report(
    address_lines: list[str],
    street_lines: list[str],
    alley_lines: list[str],
    headings: dict[str, str] | None = None,
) -> str:
    headings = headings or DEFAULT_HEADINGS
    sections = [
        (headings["addresses"], address_lines),
        (headings["streets"], street_lines),
        (headings["alleys"], alley_lines),
    ]

    blocks: list[str] = []
    for heading, lines in sections:
        # Empty sections are left out entirely, heading included.
        if not lines:
            continue
        block = [heading, ""]
        for line in lines:
            block.append(line)
            block.append(REPORT_SEPARATOR)
        blocks.append("\n".join(block) + "\n")
    return "\n".join(blocks)


def write_report(
    path: Path,
    address_lines: list[str],
    street_lines: list[str],
    alley_lines: list[str],
    headings: dict[str, str] | None = None,
) -> Path:
    write_text(path, render_report(address_lines, street_lines, alley_lines, headings))
    return path


def write_run_summary(path: Path, run_id: str, run_date: str, stats: dict, cache_hits: dict[str, int]) -> Path:
    rows_dropped = int(stats.get("rows_dropped", 0))
    postal_misses = int(stats.get("postal_misses", 0))

    status = "success"
    if postal_misses > 0 or rows_dropped > 0:
        status = "partial"

    payload = {
        "run_id": run_id,
        "run_date": run_date,
        "status": status,
        "counts": dict(sorted(stats.items())),
        "cache_hits": dict(sorted(cache_hits.items())),
    }
    write_json(path, payload)
    return path
