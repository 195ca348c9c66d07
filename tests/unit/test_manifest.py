from pathlib import Path

import pytest

from manifest_reconciler.common.errors import ContractError, StageError
from manifest_reconciler.pipeline.manifest import output_header, read_manifest, serialize_row, to_int


def test_output_header_inserts_complement_after_address():
    header = ["Sequence", "Stop", "Destination Address", "Zipcode/Postal code"]

    assert output_header(header, "Destination Address", "Complement") == [
        "Sequence",
        "Stop",
        "Destination Address",
        "Complement",
        "Zipcode/Postal code",
    ]


def test_output_header_does_not_duplicate_existing_complement():
    header = ["Complement", "Destination Address"]

    assert output_header(header, "Destination Address", "Complement") == ["Destination Address", "Complement"]


def test_output_header_requires_address_column():
    with pytest.raises(ContractError):
        output_header(["Sequence"], "Destination Address", "Complement")


def test_to_int_truncates_fractional_text():
    assert to_int("3.0") == 3
    assert to_int(" 12 ") == 12
    assert to_int("") == 0
    assert to_int(None) == 0
    assert to_int(5) == 5


def test_serialize_row_orders_fields_and_coerces_integers():
    row = {"Stop": "2.5", "Sequence": "10.0", "Destination Address": "Rua A, 1", "Extra": "x"}

    out = serialize_row(row, ["Sequence", "Stop", "Destination Address", "Complement"], ["Sequence", "Stop"])

    assert out == {"Sequence": 10, "Stop": 2, "Destination Address": "Rua A, 1", "Complement": ""}


def test_read_manifest_handles_quoted_commas(tmp_path: Path):
    path = tmp_path / "in.csv"
    path.write_text(
        'Sequence,Destination Address\n1,"Rua A, 10, ap 2"\n',
        encoding="utf-8",
    )

    with read_manifest(path) as (header, rows):
        assert list(rows) == [{"Sequence": "1", "Destination Address": "Rua A, 10, ap 2"}]

    assert header == ["Sequence", "Destination Address"]


def test_read_manifest_missing_file(tmp_path: Path):
    with pytest.raises(StageError):
        with read_manifest(tmp_path / "missing.csv"):
            pass


def test_read_manifest_closes_file_when_header_is_rejected(tmp_path: Path):
    path = tmp_path / "in.csv"
    path.write_text("Sequence\n1\n", encoding="utf-8")

    with pytest.raises(ContractError):
        with read_manifest(path) as (header, rows):
            output_header(header, "Destination Address", "Complement")

    with pytest.raises(ValueError, match="closed file"):
        next(rows)
