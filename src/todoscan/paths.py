"""Path utilities: root validation, root confinement, relative POSIX form."""

from __future__ import annotations

import os

from todoscan.errors import E_ROOT_NOT_A_DIRECTORY, E_ROOT_NOT_FOUND, ScanRootError


def resolve_root(root_path: str) -> str:
    """Return the absolute form of a scan root.

    Raises ScanRootError if the root is missing or not a directory.
    """
    root_abs = os.path.abspath(root_path)
    if not os.path.exists(root_abs):
        raise ScanRootError(E_ROOT_NOT_FOUND, root_abs, f"Scan root does not exist: {root_abs}")
    if not os.path.isdir(root_abs):
        raise ScanRootError(
            E_ROOT_NOT_A_DIRECTORY, root_abs, f"Scan root is not a directory: {root_abs}"
        )
    return root_abs


def is_under_root(target_abs: str, root_abs: str) -> bool:
    """Check if target is inside root using normalized comparison."""
    t = os.path.normcase(os.path.normpath(target_abs))
    r = os.path.normcase(os.path.normpath(root_abs))
    if not r.endswith(os.sep):
        r += os.sep
    return t.startswith(r) or t == r.rstrip(os.sep)


def to_posix_relative(path: str) -> str:
    """Normalize a root-relative path to '/'-separated form.

    "./src\\dist/" -> "src/dist"
    "."            -> ""
    """
    rel = path.replace(os.sep, "/") if os.sep != "/" else path
    parts = [p for p in rel.split("/") if p and p != "."]
    return "/".join(parts)
