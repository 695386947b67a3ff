"""Create a sample project tree for manual todoscan checks.

Usage: python scripts/create_fixtures.py <root_dir>

Creates entries that exercise the scanner and extractor:
  - .gitignore            (node_modules/, *.log, /dist, !important.log)
  - src/app.ts            (TODO + FIXME)
  - src/dist/keep.js      (NOTE, kept: /dist is anchored)
  - dist/bundle.js        (pruned)
  - node_modules/dep.js   (pruned)
  - debug.log             (excluded)
  - important.log         (re-included, BUG)
  - blob.bin              (not UTF-8, skipped by the extractor)
"""

from __future__ import annotations

import os
import sys

FILES: dict[str, str] = {
    ".gitignore": "node_modules/\n*.log\n/dist\n!important.log\n",
    "src/app.ts": "const a = 1;\n// TODO: wire up the client\n// FIXME: off by one\n",
    "src/dist/keep.js": "// NOTE: anchored rule leaves this alone\n",
    "dist/bundle.js": "// TODO: generated, never reported\n",
    "node_modules/dep.js": "// HACK: vendored, never reported\n",
    "debug.log": "BUG: excluded by *.log\n",
    "important.log": "BUG: re-included by negation\n",
}


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python create_fixtures.py <root_dir>", file=sys.stderr)
        sys.exit(1)

    root = sys.argv[1]
    if not os.path.isdir(root):
        print(f"Root does not exist: {root}", file=sys.stderr)
        sys.exit(1)

    for rel, content in FILES.items():
        path = os.path.join(root, *rel.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        print(f"  created: {rel}")

    with open(os.path.join(root, "blob.bin"), "wb") as f:
        f.write(b"\xff\xfe\x00TODO: binary\x80")
    print("  created: blob.bin (not UTF-8)")

    count = sum(len(files) for _, _, files in os.walk(root))
    print(f"  root contains {count} files; expect 4 findings from find_todos")


if __name__ == "__main__":
    main()
