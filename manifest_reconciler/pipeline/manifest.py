"""Manifest CSV reading and writing."""

from __future__ import annotations

import csv
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from manifest_reconciler.common.errors import ContractError, StageError

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@contextmanager
def read_manifest(path: Path) -> Iterator[tuple[list[str], Iterator[dict[str, str]]]]:
    """Yield the header and a lazy row iterator; the file closes when the block exits."""
    if not path.exists():
        raise StageError(f"Missing manifest input: {path}")

    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        header = list(reader.fieldnames or [])
        rows = ({key: value for key, value in row.items() if key is not None} for row in reader)
        yield header, rows


def output_header(input_header: list[str], address_field: str, complement_field: str) -> list[str]:
    if address_field not in input_header:
        raise ContractError(f"Manifest header has no '{address_field}' column")
    header = [name for name in input_header if name != complement_field]
    header.insert(header.index(address_field) + 1, complement_field)
    return header


def to_int(value: object) -> int:
    """Integer part of a textual number ("12", "12.0", " 7 ") or 0 when there is none."""
    if isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(str(value or ""))
    return int(match.group(1)) if match else 0


def serialize_row(row: dict, header: list[str], integer_fields: Iterable[str]) -> dict:
    integer_fields = set(integer_fields)
    out = {}
    for key in header:
        value = row.get(key)
        if key in integer_fields:
            out[key] = to_int(value)
        elif value is None:
            out[key] = ""
        else:
            out[key] = value
    return out
