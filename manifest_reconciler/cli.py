"""CLI entrypoint for the delivery manifest reconciler."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from manifest_reconciler.common.config_loader import ConfigBundle, load_config
from manifest_reconciler.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from manifest_reconciler.common.errors import PipelineError
from manifest_reconciler.common.http import HttpClient, RetryConfig
from manifest_reconciler.common.ids import generate_run_id
from manifest_reconciler.common.logging import build_logger, close_logger, log_event
from manifest_reconciler.common.time_utils import output_date_label, parse_run_date
from manifest_reconciler.lookups.geocoding import GoogleGeocoder
from manifest_reconciler.lookups.viacep import ViaCepClient
from manifest_reconciler.pipeline.inbox import run_inbox
from manifest_reconciler.pipeline.run import run_manifest


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--input", default=None)
    parser.add_argument("--output", default=None)
    parser.add_argument("--report", default=None)
    parser.add_argument("--summary", default=None)
    parser.add_argument("--source-dir", default=None)
    parser.add_argument("--destination-dir", default=None)
    parser.add_argument("--run-date", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def build_lookups(bundle: ConfigBundle, logger: logging.Logger) -> tuple[HttpClient, ViaCepClient, GoogleGeocoder]:
    http_client = HttpClient(
        retry=RetryConfig.from_config(bundle.http),
        rate_per_sec=float(bundle.http.get("rate_limit_per_sec", 10.0)),
    )
    postal = ViaCepClient(bundle.postal, http_client=http_client, logger=logger)
    geocoder = GoogleGeocoder(bundle.geocoding, http_client=http_client, logger=logger)
    return http_client, postal, geocoder


def _default_outputs(input_path: Path, run_date: str, bundle: ConfigBundle) -> tuple[Path, Path]:
    label = output_date_label(run_date)
    out_dir = input_path.parent
    return (
        out_dir / f"{label} {bundle.inbox['output_label']}.csv",
        out_dir / f"{label} {bundle.inbox['report_label']}.txt",
    )


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    run_date = parse_run_date(args.run_date)
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        bundle = load_config(config_dir, overlay_config_dir=overlay_config_dir)
        log_event(logger, "run start", run_id=run_id, stage=args.command, event="RUN_START", status="ok")

        http_client, postal, geocoder = build_lookups(bundle, logger)
        with http_client:
            if args.command == "reconcile":
                if not args.input:
                    raise ValueError("--input is required for reconcile")
                input_path = Path(args.input)
                default_output, default_report = _default_outputs(input_path, run_date, bundle)
                run_manifest(
                    input_path,
                    Path(args.output) if args.output else default_output,
                    Path(args.report) if args.report else default_report,
                    bundle,
                    postal,
                    geocoder,
                    run_id=run_id,
                    run_date=run_date,
                    summary_path=Path(args.summary) if args.summary else None,
                    logger=logger,
                )
                return EXIT_SUCCESS

            if not args.source_dir or not args.destination_dir:
                raise ValueError("--source-dir and --destination-dir are required for inbox")
            result = run_inbox(
                Path(args.source_dir),
                Path(args.destination_dir),
                bundle,
                postal,
                geocoder,
                data_dir=data_dir,
                run_id=run_id,
                run_date=run_date,
                logger=logger,
            )
            if result["failures"]:
                return EXIT_PARTIAL
            return EXIT_SUCCESS
    except PipelineError as exc:
        logger.error(
            f"run failed: {exc}",
            extra={"run_id": run_id, "stage": args.command, "event": "RUN_FAIL", "status": "error", "error_code": exc.error_code},
        )
        return EXIT_HARD_FAIL
    except Exception as exc:
        logger.exception(
            f"fatal error: {exc}",
            extra={"run_id": run_id, "stage": args.command, "event": "RUN_FAIL", "status": "error", "error_code": "UNEXPECTED_ERROR"},
        )
        return EXIT_HARD_FAIL
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
