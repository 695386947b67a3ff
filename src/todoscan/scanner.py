"""Repository scanner: depth-first file enumeration filtered by the root ignore file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterator

from todoscan.config import DEFAULT_IGNORE_FILE
from todoscan.ignore import load_ignore_file
from todoscan.paths import resolve_root

logger = logging.getLogger(__name__)


@dataclass
class ScanStats:
    visited: int = 0
    retained: int = 0
    excluded_files: int = 0
    pruned_dirs: int = 0
    skipped_links: int = 0
    unreadable_dirs: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "visited": self.visited,
            "retained": self.retained,
            "excludedFiles": self.excluded_files,
            "prunedDirs": self.pruned_dirs,
            "skippedLinks": self.skipped_links,
            "unreadableDirs": self.unreadable_dirs,
        }


@dataclass
class ScanResult:
    root: str
    files: list[str] = field(default_factory=list)
    stats: ScanStats = field(default_factory=ScanStats)
    truncated: bool = False  # max_files was reached

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "files": list(self.files),
            "stats": self.stats.to_dict(),
            "truncated": self.truncated,
        }


def scan_tree(
    root_path: str,
    *,
    ignore_file: str = DEFAULT_IGNORE_FILE,
    max_depth: int | None = None,
    max_files: int | None = None,
) -> ScanResult:
    """Enumerate regular files under root_path that survive the root ignore file.

    Entries are visited in name order. An excluded directory is pruned
    without being listed. Symlinks are never followed or returned, and a
    directory that cannot be listed is skipped.

    Args:
        root_path: Directory to scan. Relative paths resolve against the cwd.
        ignore_file: Name of the ignore file read from the root only.
        max_depth: Deepest directory level to descend into (0 = root only).
        max_files: Stop once this many files were retained.

    Raises:
        ScanRootError: If root_path is missing or not a directory.
    """
    root_abs = resolve_root(root_path)
    ignore_set = load_ignore_file(os.path.join(root_abs, ignore_file))
    result = ScanResult(root=root_abs)
    stats = result.stats

    def listing(current: str) -> list[os.DirEntry[str]] | None:
        try:
            with os.scandir(current) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            stats.unreadable_dirs += 1
            logger.debug("Skipping unlistable directory %s: %s", current, e)
            return None

    # one (pending entries, relative prefix, depth) frame per open directory
    stack: list[tuple[Iterator[os.DirEntry[str]], str, int]] = []
    entries = listing(root_abs)
    if entries is not None:
        stack.append((iter(entries), "", 0))

    while stack:
        pending, rel_prefix, depth = stack[-1]
        entry = next(pending, None)
        if entry is None:
            stack.pop()
            continue

        stats.visited += 1
        rel = rel_prefix + entry.name
        try:
            if entry.is_symlink():
                stats.skipped_links += 1
                continue
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file(follow_symlinks=False)
        except OSError as e:
            logger.debug("Skipping entry that vanished during scan %s: %s", entry.path, e)
            continue

        if is_dir:
            if ignore_set.matches(rel, True):
                stats.pruned_dirs += 1
                continue
            if max_depth is not None and depth >= max_depth:
                continue
            children = listing(entry.path)
            if children is not None:
                stack.append((iter(children), rel + "/", depth + 1))
        elif is_file:
            if ignore_set.matches(rel, False):
                stats.excluded_files += 1
                continue
            result.files.append(entry.path)
            stats.retained += 1
            if max_files is not None and stats.retained >= max_files:
                result.truncated = True
                break
        # sockets, fifos, devices: skipped

    logger.info(
        "Scanned %s: %d files retained, %d excluded, %d directories pruned",
        root_abs, stats.retained, stats.excluded_files, stats.pruned_dirs,
    )
    return result


def scan(
    root_path: str,
    *,
    ignore_file: str = DEFAULT_IGNORE_FILE,
    max_depth: int | None = None,
    max_files: int | None = None,
) -> list[str]:
    """Return the absolute paths of all eligible files under root_path."""
    return scan_tree(
        root_path, ignore_file=ignore_file, max_depth=max_depth, max_files=max_files
    ).files
