from __future__ import annotations

import argparse
import sys
from pathlib import Path

from schemadoc.config.loader import ConfigError, load_config, resolve_config_path
from schemadoc.csvio.reader import CsvDirectoryError
from schemadoc.logging.error_log import ErrorLogBuffer
from schemadoc.logging.init import log_summary, set_debug, setup_logging
from schemadoc.services.importer import run_import
from schemadoc.services.summary import render_import_summary
from schemadoc.sheets.client import CredentialsError, build_services
from schemadoc.sheets.uploader import UploadError

from .common import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, flush_error_log, load_env_file

"""Import command: CSV tree -> formatted Google Sheets spreadsheet.

Exit codes: 0 every sheet uploaded, 1 fatal error, 2 some sheets skipped.
"""


def build_parser(p: argparse.ArgumentParser | None = None) -> argparse.ArgumentParser:
    p = p or argparse.ArgumentParser(description="Upload exported schema CSV files to Google Sheets")
    p.add_argument("--csv-dir", help="CSV directory (overrides CSV_DIRECTORY)")
    p.add_argument("--config", help="YAML config file (default: config/schemadoc.yml if present)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p


def run(args: argparse.Namespace) -> int:
    logger = setup_logging()
    load_env_file(Path(".env"), override=True)
    if args.debug:
        set_debug(logger)

    try:
        cfg = load_config(resolve_config_path(args.config))
        csv_dir = cfg.csv_directory(args.csv_dir)
        sheets_cfg = cfg.require_sheets()
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if not csv_dir.is_dir():
        logger.error(f"directory not found: {csv_dir}")
        return EXIT_FATAL

    try:
        sheets_service, drive_service = build_services(sheets_cfg.key_file or "")
    except CredentialsError as e:
        logger.error(f"credentials: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer()
    try:
        result = run_import(cfg, sheets_service, drive_service, csv_directory=csv_dir, error_log=error_log)
    except CsvDirectoryError as e:
        logger.error(f"directory: {e}")
        return EXIT_FATAL
    except UploadError as e:
        logger.error(f"upload: {e}")
        return EXIT_FATAL
    finally:
        flush_error_log(error_log, logger)

    log_summary(render_import_summary(result)[len("SUMMARY "):])
    if result.failed_sheets > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    return run(build_parser().parse_args(argv))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
