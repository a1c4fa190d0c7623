from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

from schemadoc.logging.error_log import ErrorLogBuffer

"""Shared CLI plumbing: exit codes, .env loading, error log flushing."""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True: .env の値で既存環境変数を上書き (接続情報は .env を最優先)。
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def flush_error_log(error_log: ErrorLogBuffer, logger: logging.Logger) -> None:
    path = error_log.flush()
    if path is not None:
        logger.info(f"error log written: {path}")
