"""Convert the first sheet of an XLSX manifest to CSV."""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

from openpyxl import load_workbook

from manifest_reconciler.common.errors import StageError
from manifest_reconciler.common.fs import ensure_dir


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    # Spreadsheets store postal codes and sequence numbers as floats.
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def convert_xlsx_to_csv(xlsx_path: Path, csv_path: Path) -> int:
    if not xlsx_path.exists():
        raise StageError(f"Missing spreadsheet input: {xlsx_path}")

    workbook = load_workbook(xlsx_path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        ensure_dir(csv_path.parent)
        rows_written = 0
        with csv_path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            for values in sheet.iter_rows(values_only=True):
                writer.writerow([_cell_text(value) for value in values])
                rows_written += 1
    finally:
        workbook.close()
    return rows_written
