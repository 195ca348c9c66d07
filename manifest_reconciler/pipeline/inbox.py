"""Process manifests dropped into a source folder since the last check."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from manifest_reconciler.common.config_loader import ConfigBundle
from manifest_reconciler.common.errors import PipelineError
from manifest_reconciler.common.fs import ensure_dir, read_json, write_json
from manifest_reconciler.common.logging import log_event, log_warning
from manifest_reconciler.common.time_utils import from_timestamp, output_date_label, parse_timestamp
from manifest_reconciler.pipeline.reconcile import Geocoder, PostalLookup
from manifest_reconciler.pipeline.run import run_manifest
from manifest_reconciler.pipeline.spreadsheet import convert_xlsx_to_csv

STAGE = "inbox"


@dataclass(frozen=True)
class InboxFile:
    path: Path
    modified_at: datetime


def load_last_checked(state_path: Path) -> datetime:
    if not state_path.exists():
        return parse_timestamp(None)
    payload = read_json(state_path)
    return parse_timestamp(payload.get("last_checked"))


def save_last_checked(state_path: Path, checked_at: datetime) -> None:
    write_json(state_path, {"last_checked": checked_at.isoformat()})


def list_new_files(source_dir: Path, extensions: list[str], since: datetime) -> list[InboxFile]:
    wanted = {ext.lower() for ext in extensions}
    found: list[InboxFile] = []
    for path in source_dir.iterdir():
        if not path.is_file() or path.suffix.lower() not in wanted:
            continue
        modified_at = from_timestamp(path.stat().st_mtime)
        if modified_at > since:
            found.append(InboxFile(path=path, modified_at=modified_at))
    return sorted(found, key=lambda item: (item.modified_at, item.path.name))


def output_paths(destination_dir: Path, inbox_config: dict, run_date: str, stem: str) -> tuple[Path, Path, Path]:
    label = output_date_label(run_date)
    base = f"{label} {inbox_config['output_label']} - {stem}"
    return (
        destination_dir / f"{base}.csv",
        destination_dir / f"{label} {inbox_config['report_label']} - {stem}.txt",
        destination_dir / f"{base}.summary.json",
    )


def _prepare_input(item: InboxFile, work_dir: Path) -> tuple[Path, Path | None]:
    if item.path.suffix.lower() != ".xlsx":
        return item.path, None
    csv_path = work_dir / f"{item.path.stem}.csv"
    convert_xlsx_to_csv(item.path, csv_path)
    return csv_path, csv_path


def run_inbox(
    source_dir: Path,
    destination_dir: Path,
    bundle: ConfigBundle,
    postal_lookup: PostalLookup,
    geocoder: Geocoder,
    *,
    data_dir: Path,
    run_id: str,
    run_date: str,
    logger: logging.Logger | None = None,
) -> dict:
    logger = logger or logging.getLogger(__name__)
    inbox_config = bundle.inbox
    state_path = data_dir / "state" / inbox_config["state_filename"]
    work_dir = data_dir / "work" / run_id
    ensure_dir(destination_dir)

    last_checked = load_last_checked(state_path)
    checked_at = datetime.now(tz=timezone.utc)
    log_event(logger, f"last check: {last_checked.isoformat()}", run_id=run_id, stage=STAGE, event="INBOX_SCAN")

    new_files = list_new_files(source_dir, inbox_config["extensions"], last_checked)
    log_event(
        logger,
        f"new files for processing: {len(new_files)}",
        run_id=run_id,
        stage=STAGE,
        event="INBOX_SCAN",
        rows_in=len(new_files),
    )

    processed: list[str] = []
    failures: list[dict] = []
    for index, item in enumerate(new_files, start=1):
        log_event(logger, f"processing {index}/{len(new_files)}: {item.path.name}", run_id=run_id, stage=STAGE)
        output_path, report_path, summary_path = output_paths(destination_dir, inbox_config, run_date, item.path.stem)
        temp_csv = None
        try:
            input_path, temp_csv = _prepare_input(item, work_dir)
            run_manifest(
                input_path,
                output_path,
                report_path,
                bundle,
                postal_lookup,
                geocoder,
                run_id=run_id,
                run_date=run_date,
                summary_path=summary_path,
                logger=logger,
            )
            processed.append(item.path.name)
        except PipelineError as exc:
            failures.append({"file": item.path.name, "error_code": exc.error_code, "message": str(exc)})
            log_warning(
                logger,
                f"failed to process {item.path.name}: {exc}",
                run_id=run_id,
                stage=STAGE,
                event="FILE_FAIL",
                status="error",
                error_code=exc.error_code,
            )
        except Exception as exc:
            # Corrupt XLSX or non UTF-8 CSV input.
            failures.append({"file": item.path.name, "error_code": "UNEXPECTED_ERROR", "message": str(exc)})
            log_warning(
                logger,
                f"failed to process {item.path.name}: {exc.__class__.__name__}: {exc}",
                run_id=run_id,
                stage=STAGE,
                event="FILE_FAIL",
                status="error",
                error_code="UNEXPECTED_ERROR",
            )
        finally:
            if temp_csv is not None and temp_csv.exists():
                temp_csv.unlink()

    if not failures:
        save_last_checked(state_path, checked_at)
        log_event(logger, "updated last check time", run_id=run_id, stage=STAGE, event="INBOX_STATE")

    return {
        "run_id": run_id,
        "files_found": len(new_files),
        "processed": processed,
        "failures": failures,
    }
