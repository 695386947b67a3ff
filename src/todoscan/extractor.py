"""Comment extractor: turn file contents into TODO/FIXME/... findings."""

from __future__ import annotations

import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from todoscan.config import ScanConfig
from todoscan.models import TAGS, Finding
from todoscan.scanner import scan

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"(" + "|".join(TAGS) + r"):[ \t]*(.*)")


def extract_file(path: str | os.PathLike[str]) -> list[Finding]:
    """Return the findings of one file in line order.

    Unreadable or non-UTF-8 files yield no findings.
    """
    file = os.fspath(path)
    try:
        # newline="" keeps "\r" in place so line numbers follow "\n" only
        with open(file, encoding="utf-8", newline="") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Skipping unreadable file %s: %s", file, e)
        return []

    findings: list[Finding] = []
    for lineno, line in enumerate(content.split("\n"), start=1):
        m = TAG_PATTERN.search(line)
        if m:
            kind, payload = m.groups()
            findings.append(Finding(file=file, line=lineno, kind=kind, text=payload.strip()))
    return findings


def extract(file_paths: Iterable[str], *, workers: int = 1) -> list[Finding]:
    """Extract findings from files, ordered by input file then line.

    With workers > 1 files are read on a thread pool; each file's findings
    are collected separately and concatenated in input order, so the result
    equals the sequential one.
    """
    paths = list(file_paths)
    if workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            per_file = list(pool.map(extract_file, paths))
    else:
        per_file = [extract_file(p) for p in paths]

    findings = [f for chunk in per_file for f in chunk]
    logger.info("Extracted %d findings from %d files", len(findings), len(paths))
    return findings


def find_todos(root: str | None = None, *, config: ScanConfig | None = None) -> list[Finding]:
    """Scan a tree and extract its findings.

    The root defaults to config.root when a config is given, otherwise to
    the current working directory.

    Raises:
        ScanRootError: If the root is missing or not a directory.
    """
    cfg = config or ScanConfig(root=os.getcwd())
    files = scan(
        cfg.root if root is None else root,
        ignore_file=cfg.ignore_file,
        max_depth=cfg.max_depth,
        max_files=cfg.max_files,
    )
    return extract(files, workers=cfg.workers)
