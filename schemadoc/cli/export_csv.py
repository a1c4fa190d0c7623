from __future__ import annotations

import argparse
import sys
from pathlib import Path

from schemadoc.config.loader import ConfigError, load_config, resolve_config_path
from schemadoc.csvio.writer import FileSystemError
from schemadoc.db.connection import SchemaReadError
from schemadoc.logging.error_log import ErrorLogBuffer
from schemadoc.logging.init import log_summary, set_debug, setup_logging
from schemadoc.services.exporter import run_export
from schemadoc.services.summary import render_export_summary

from .common import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, flush_error_log, load_env_file

"""Export command: MySQL schema -> CSV tree.

Exit codes: 0 all tables exported, 1 fatal error, 2 some tables skipped (--keep-going).
"""


def build_parser(p: argparse.ArgumentParser | None = None) -> argparse.ArgumentParser:
    p = p or argparse.ArgumentParser(description="Export MySQL schema metadata to CSV files")
    p.add_argument("--output-root", help="Directory under which the <database> directory is created")
    p.add_argument("--config", help="YAML config file (default: config/schemadoc.yml if present)")
    p.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip tables whose metadata cannot be read instead of aborting",
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p


def run(args: argparse.Namespace) -> int:
    logger = setup_logging()
    load_env_file(Path(".env"), override=True)
    if args.debug:
        set_debug(logger)

    try:
        cfg = load_config(resolve_config_path(args.config))
        cfg.require_database()
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer()
    try:
        result = run_export(
            cfg,
            output_root=Path(args.output_root) if args.output_root else None,
            keep_going=args.keep_going,
            error_log=error_log,
        )
    except SchemaReadError as e:
        logger.error(f"schema: {e}")
        return EXIT_FATAL
    except FileSystemError as e:
        logger.error(f"filesystem: {e}")
        return EXIT_FATAL
    finally:
        flush_error_log(error_log, logger)

    # log_summary が "SUMMARY " を付与するため先頭を除去
    log_summary(render_export_summary(result)[len("SUMMARY "):])
    if result.failed_tables > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # [] を渡されたときに sys.argv[1:] (pytest の引数) が混入しないよう None のときだけ読む
    if argv is None:
        argv = sys.argv[1:]
    return run(build_parser().parse_args(argv))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
