import csv
from pathlib import Path

import pytest
from openpyxl import Workbook

from manifest_reconciler.common.errors import StageError
from manifest_reconciler.pipeline.spreadsheet import convert_xlsx_to_csv


def test_convert_first_sheet_to_csv(tmp_path: Path):
    xlsx_path = tmp_path / "manifest.xlsx"
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Sequence", "Destination Address", "Zipcode/Postal code"])
    sheet.append([1.0, "Rua A, 10, fundos", 12345678])
    sheet.append([2, None, "01310-100"])
    workbook.create_sheet("ignored").append(["x"])
    workbook.save(xlsx_path)

    csv_path = tmp_path / "out" / "manifest.csv"
    rows_written = convert_xlsx_to_csv(xlsx_path, csv_path)

    with csv_path.open("r", encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))

    assert rows_written == 3
    assert rows == [
        ["Sequence", "Destination Address", "Zipcode/Postal code"],
        ["1", "Rua A, 10, fundos", "12345678"],
        ["2", "", "01310-100"],
    ]


def test_convert_missing_file(tmp_path: Path):
    with pytest.raises(StageError):
        convert_xlsx_to_csv(tmp_path / "missing.xlsx", tmp_path / "out.csv")
