"""Tests for the repository scanner: filtering, pruning, guards, failure handling."""

from __future__ import annotations

import os

import pytest

from todoscan.errors import E_ROOT_NOT_A_DIRECTORY, E_ROOT_NOT_FOUND, ScanRootError
from todoscan.scanner import scan, scan_tree

from conftest import rel_files


def test_all_files_returned_without_gitignore(make_tree):
    root = make_tree({
        "file1.ts": "content",
        "file2.js": "content",
        "subdir/file3.ts": "content",
    })
    assert rel_files(root, scan(root)) == ["file1.ts", "file2.js", "subdir/file3.ts"]


def test_paths_are_absolute(make_tree):
    root = make_tree({"file.ts": "x", "subdir/nested.ts": "x"})
    files = scan(root)
    assert files
    for f in files:
        assert os.path.isabs(f)
        assert f.startswith(root)


def test_relative_root_resolves_against_cwd(make_tree, monkeypatch):
    root = make_tree({"a.ts": "x"})
    monkeypatch.chdir(root)
    assert scan(".") == [os.path.join(root, "a.ts")]


def test_gitignore_patterns_filter_files(make_tree):
    root = make_tree({
        ".gitignore": "node_modules/\n*.log\n",
        "file1.ts": "content",
        "file2.log": "content",
        "node_modules/package.json": "content",
        "src/index.ts": "content",
    })
    assert rel_files(root, scan(root)) == [".gitignore", "file1.ts", "src/index.ts"]


def test_complex_gitignore(make_tree):
    root = make_tree({
        ".gitignore": (
            "\n# Dependencies\nnode_modules/\n*.log\n\n# Build outputs\ndist/\nbuild/\n\n"
            "# IDE\n.vscode/\n.idea/\n\n# Specific files\nconfig.local.ts\n!important.log\n"
        ),
        "src/index.ts": "content",
        "node_modules/lib.js": "content",
        "debug.log": "content",
        "dist/bundle.js": "content",
        ".vscode/settings.json": "content",
        "config.local.ts": "content",
        "important.log": "content",
    })
    assert rel_files(root, scan(root)) == [".gitignore", "important.log", "src/index.ts"]


def test_wildcard_patterns(make_tree):
    root = make_tree({
        ".gitignore": "*.test.ts\ntemp-*",
        "index.ts": "x",
        "utils.test.ts": "x",
        "helper.test.ts": "x",
        "temp-file.txt": "x",
        "temp-data.json": "x",
        "data.json": "x",
    })
    assert rel_files(root, scan(root)) == [".gitignore", "data.json", "index.ts"]


def test_empty_gitignore_excludes_nothing(make_tree):
    root = make_tree({".gitignore": "", "file1.ts": "x", "file2.js": "x"})
    assert len(scan(root)) == 3


def test_comment_only_gitignore_excludes_nothing(make_tree):
    root = make_tree({".gitignore": "\n# This is a comment\n\n  # Another\n  \n", "file1.ts": "x"})
    assert rel_files(root, scan(root)) == [".gitignore", "file1.ts"]


def test_invalid_gitignore_range_is_skipped(make_tree):
    root = make_tree({
        ".gitignore": "[z-a].txt\n*.log\n",
        "b.txt": "x",
        "debug.log": "x",
        "src/index.ts": "x",
    })
    assert rel_files(root, scan(root)) == [".gitignore", "b.txt", "src/index.ts"]


def test_empty_directory(tmp_path):
    assert scan(str(tmp_path)) == []


def test_anchored_and_unanchored_dist(make_tree):
    files = {
        "dist/bundle.js": "x",
        "src/dist/other.js": "x",
        "src/index.ts": "x",
    }
    root = make_tree({".gitignore": "/dist", **files})
    assert rel_files(root, scan(root)) == [".gitignore", "src/dist/other.js", "src/index.ts"]

    with open(os.path.join(root, ".gitignore"), "w", encoding="utf-8") as f:
        f.write("dist/")
    assert rel_files(root, scan(root)) == [".gitignore", "src/index.ts"]


def test_pruned_directory_cannot_be_reincluded(make_tree):
    root = make_tree({
        ".gitignore": "build/\n!build/keep.txt\n!keep.txt\n",
        "build/keep.txt": "x",
        "build/nested/.gitignore": "!*\n",
        "build/nested/file.js": "x",
        "src/keep.txt": "x",
    })
    result = scan_tree(root)
    assert rel_files(root, result.files) == [".gitignore", "src/keep.txt"]
    assert result.stats.pruned_dirs == 1


def test_pruned_directory_is_not_listed(make_tree, monkeypatch):
    root = make_tree({".gitignore": "cache/\n", "cache/a/b.txt": "x", "src/c.txt": "x"})
    listed = []
    real_scandir = os.scandir

    def spying_scandir(path):
        listed.append(os.path.relpath(path, root))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", spying_scandir)
    scan(root)
    assert "cache" not in listed
    assert os.path.join("cache", "a") not in listed
    assert "src" in listed


def test_nested_gitignore_not_consulted(make_tree):
    root = make_tree({"sub/.gitignore": "*.ts\n", "sub/a.ts": "x"})
    assert rel_files(root, scan(root)) == ["sub/.gitignore", "sub/a.ts"]


def test_custom_ignore_file_name(make_tree):
    root = make_tree({".todoignore": "*.md\n", ".gitignore": "*.ts\n", "a.md": "x", "b.ts": "x"})
    assert rel_files(root, scan(root, ignore_file=".todoignore")) == [
        ".gitignore", ".todoignore", "b.ts",
    ]


def test_scan_is_idempotent_and_ordered(make_tree):
    root = make_tree({
        ".gitignore": "*.tmp\n",
        "b/z.ts": "x",
        "a.ts": "x",
        "b/a.ts": "x",
        "c.tmp": "x",
        "c/d/e.ts": "x",
    })
    first = scan(root)
    second = scan(root)
    assert first == second
    assert [os.path.relpath(f, root).replace(os.sep, "/") for f in first] == [
        ".gitignore", "a.ts", "b/a.ts", "b/z.ts", "c/d/e.ts",
    ]


def test_large_number_of_files(make_tree):
    tree = {".gitignore": "*.log"}
    for i in range(100):
        tree[f"file{i}.ts"] = "content"
        if i % 10 == 0:
            tree[f"debug{i}.log"] = "content"
    root = make_tree(tree)

    result = scan_tree(root)
    assert len(result.files) == 101
    assert not [f for f in result.files if f.endswith(".log")]
    assert result.stats.excluded_files == 10
    assert result.stats.retained == 101


# --- Guards ---


def test_max_depth(make_tree):
    root = make_tree({"a.ts": "x", "d1/b.ts": "x", "d1/d2/c.ts": "x"})
    assert rel_files(root, scan(root, max_depth=0)) == ["a.ts"]
    assert rel_files(root, scan(root, max_depth=1)) == ["a.ts", "d1/b.ts"]
    assert len(scan(root)) == 3


def test_deeply_nested_tree(tmp_path):
    depth = 1100
    dirs = []
    current = str(tmp_path)
    for _ in range(depth):
        current = os.path.join(current, "d")
        os.mkdir(current)
        dirs.append(current)
    with open(os.path.join(current, "deep.ts"), "w", encoding="utf-8") as f:
        f.write("// TODO: bottom")
    try:
        files = scan(str(tmp_path))
        assert len(files) == 1
        assert os.path.basename(files[0]) == "deep.ts"
        assert scan(str(tmp_path), max_depth=depth - 1) == []
    finally:
        # bottom-up, so cleanup never recurses through the whole chain
        os.remove(os.path.join(current, "deep.ts"))
        for d in reversed(dirs):
            os.rmdir(d)


def test_max_files_truncates(make_tree):
    root = make_tree({f"f{i}.ts": "x" for i in range(5)})
    result = scan_tree(root, max_files=2)
    assert rel_files(root, result.files) == ["f0.ts", "f1.ts"]
    assert result.truncated

    assert not scan_tree(root).truncated


# --- Non-regular entries ---


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="POSIX symlinks")
def test_symlinks_are_not_followed(make_tree, tmp_path_factory):
    outside = tmp_path_factory.mktemp("outside")
    (outside / "secret.ts").write_text("// TODO: outside", encoding="utf-8")
    root = make_tree({"a.ts": "x"})
    os.symlink(str(outside), os.path.join(root, "linked_dir"))
    os.symlink(os.path.join(root, "a.ts"), os.path.join(root, "b.ts"))

    result = scan_tree(root)
    assert rel_files(root, result.files) == ["a.ts"]
    assert result.stats.skipped_links == 2


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="POSIX fifos")
def test_fifo_is_skipped(make_tree):
    root = make_tree({"a.ts": "x"})
    os.mkfifo(os.path.join(root, "pipe"))
    assert rel_files(root, scan(root)) == ["a.ts"]


# --- Failure semantics ---


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="POSIX permissions, non-root")
def test_unreadable_directory_is_skipped(make_tree):
    root = make_tree({"ok/a.ts": "x", "locked/b.ts": "x"})
    locked = os.path.join(root, "locked")
    os.chmod(locked, 0)
    try:
        result = scan_tree(root)
    finally:
        os.chmod(locked, 0o755)
    assert rel_files(root, result.files) == ["ok/a.ts"]
    assert result.stats.unreadable_dirs == 1


def test_unlistable_directory_is_skipped(make_tree, monkeypatch):
    root = make_tree({"ok/a.ts": "x", "gone/b.ts": "x"})
    real_scandir = os.scandir

    def flaky_scandir(path):
        if os.path.basename(path) == "gone":
            raise FileNotFoundError(path)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", flaky_scandir)
    result = scan_tree(root)
    assert rel_files(root, result.files) == ["ok/a.ts"]
    assert result.stats.unreadable_dirs == 1


def test_missing_root_raises(tmp_path):
    with pytest.raises(ScanRootError) as exc:
        scan(str(tmp_path / "missing"))
    assert exc.value.code == E_ROOT_NOT_FOUND


def test_file_root_raises(make_tree):
    root = make_tree({"a.ts": "x"})
    with pytest.raises(ScanRootError) as exc:
        scan(os.path.join(root, "a.ts"))
    assert exc.value.code == E_ROOT_NOT_A_DIRECTORY


def test_scan_result_to_dict(make_tree):
    root = make_tree({".gitignore": "b/\n", "a.ts": "x", "b/c.ts": "x"})
    d = scan_tree(root).to_dict()
    assert d["root"] == root
    assert d["truncated"] is False
    assert d["stats"]["prunedDirs"] == 1
    assert d["stats"]["retained"] == 2
    assert set(d["stats"]) == {
        "visited", "retained", "excludedFiles", "prunedDirs", "skippedLinks", "unreadableDirs",
    }
