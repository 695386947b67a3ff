"""Configuration: scan root, ignore file name, traversal guards, logging."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

SERVER_NAME = "todoscan"
SERVER_VERSION = "0.1.0"
DEFAULT_IGNORE_FILE = ".gitignore"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class ScanConfig:
    root: str
    ignore_file: str = DEFAULT_IGNORE_FILE
    max_depth: int | None = None  # 0 = root entries only
    max_files: int | None = None
    workers: int = 1
    log_level: str = DEFAULT_LOG_LEVEL


def _env_int(name: str, minimum: int) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from None
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}, got {value}.")
    return value


def load_config() -> ScanConfig:
    """Build a ScanConfig from TODOSCAN_* environment variables.

    TODOSCAN_ROOT defaults to the current directory. Fail closed if the
    root is not an existing directory or a numeric guard is malformed.
    """
    root = os.path.abspath(os.environ.get("TODOSCAN_ROOT", "").strip() or os.getcwd())
    if not os.path.isdir(root):
        raise RuntimeError(f"Configured root does not exist or is not a directory: {root}")

    ignore_file = os.environ.get("TODOSCAN_IGNORE_FILE", "").strip() or DEFAULT_IGNORE_FILE
    if "/" in ignore_file or os.sep in ignore_file:
        raise RuntimeError(
            f"TODOSCAN_IGNORE_FILE must be a file name at the scan root, got {ignore_file!r}."
        )

    log_level = os.environ.get("TODOSCAN_LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"TODOSCAN_LOG_LEVEL is not a logging level: {log_level!r}.")

    return ScanConfig(
        root=root,
        ignore_file=ignore_file,
        max_depth=_env_int("TODOSCAN_MAX_DEPTH", 0),
        max_files=_env_int("TODOSCAN_MAX_FILES", 1),
        workers=_env_int("TODOSCAN_WORKERS", 1) or 1,
        log_level=log_level,
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Send log records to stderr; stdout carries the JSON-RPC stream."""
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
