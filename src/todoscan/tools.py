"""Tool handlers: scan_files, find_todos, get_server_info."""

from __future__ import annotations

import os
from typing import Any

from todoscan.config import SERVER_NAME, SERVER_VERSION, ScanConfig
from todoscan.errors import (
    E_INVALID_REQUEST,
    E_TRAVERSAL_REJECTED,
    ScanRootError,
    err,
    ok,
)
from todoscan.extractor import extract
from todoscan.models import TAGS
from todoscan.paths import is_under_root
from todoscan.scanner import ScanResult, scan_tree


def handle_scan_files(
    args: dict[str, Any],
    config: ScanConfig,
) -> dict[str, Any]:
    """List eligible files under the configured root (or a directory inside it)."""
    scanned = _scan_target(args, config)
    if not isinstance(scanned, ScanResult):
        return scanned
    return ok(scanned.to_dict())


def handle_find_todos(
    args: dict[str, Any],
    config: ScanConfig,
) -> dict[str, Any]:
    """Scan and extract annotation findings, optionally restricted to some tags."""
    kinds = args.get("kinds")
    if kinds is not None:
        if not isinstance(kinds, list) or not all(isinstance(k, str) for k in kinds):
            return err(E_INVALID_REQUEST, "'kinds' must be a list of tag names.", kinds=kinds)
        unknown = [k for k in kinds if k not in TAGS]
        if unknown:
            return err(
                E_INVALID_REQUEST,
                "Unknown tag in 'kinds'.",
                unknown=unknown,
                allowed=list(TAGS),
            )

    scanned = _scan_target(args, config)
    if not isinstance(scanned, ScanResult):
        return scanned

    findings = extract(scanned.files, workers=config.workers)
    if kinds:
        findings = [f for f in findings if f.kind in kinds]

    counts = {tag: 0 for tag in TAGS}
    for f in findings:
        counts[f.kind] += 1

    return ok({
        "root": scanned.root,
        "findings": [f.to_dict() for f in findings],
        "counts": counts,
        "truncated": scanned.truncated,
    })


def handle_get_server_info(
    _args: dict[str, Any],
    config: ScanConfig,
) -> dict[str, Any]:
    """Server metadata: name, version, tag vocabulary, root and guards."""
    return ok({
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
        "root": os.path.abspath(config.root),
        "tags": list(TAGS),
        "ignoreFile": config.ignore_file,
        "limits": {"maxDepth": config.max_depth, "maxFiles": config.max_files},
        "workers": config.workers,
    })


# --- Internal helpers ---


def _scan_target(args: dict[str, Any], config: ScanConfig) -> ScanResult | dict[str, Any]:
    """Resolve the optional 'path' argument inside the root and scan it.

    Returns the ScanResult, or an error envelope.
    """
    sub = args.get("path") or ""
    if not isinstance(sub, str):
        return err(E_INVALID_REQUEST, "'path' must be a string.", path=sub)

    root_abs = os.path.abspath(config.root)
    target_abs = os.path.abspath(os.path.join(root_abs, sub))
    # Compare resolved paths: a symlink inside the root may point outside it.
    real_root = os.path.realpath(root_abs)
    real_target = os.path.realpath(target_abs)
    if not is_under_root(real_target, real_root):
        return err(
            E_TRAVERSAL_REJECTED,
            "Target escapes configured root.",
            target=target_abs,
            root=root_abs,
        )

    try:
        return scan_tree(
            target_abs,
            ignore_file=config.ignore_file,
            max_depth=config.max_depth,
            max_files=config.max_files,
        )
    except ScanRootError as e:
        return e.envelope()
