"""Ignore matcher: compile .gitignore-style lines into an ordered rule set.

Each non-blank, non-comment line becomes an IgnoreRule. Rules are evaluated
in file order and the last rule whose pattern matches a path decides:
a plain rule excludes it, a negated ("!") rule re-includes it, and no match
leaves it included.

Matching is by path segment, never by substring:
  "*.log"      -> any "<x>.log" segment run at any depth
  "/dist"      -> only "dist" directly under the root
  "build/"     -> directories named "build" at any depth
  "docs/**"    -> everything below "docs", but not "docs" itself

A path below an excluded directory is excluded regardless of later
negations; the scanner never descends into such a directory.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from todoscan.paths import to_posix_relative

logger = logging.getLogger(__name__)

DOUBLE_STAR = "**"
NEVER_MATCHES = re.compile(r"(?!)")


def _trim_trailing_whitespace(line: str) -> str:
    """Drop trailing spaces/tabs, keeping one escaped with a backslash."""
    end = len(line)
    while end > 0 and line[end - 1] in " \t":
        if end >= 2 and line[end - 2] == "\\":
            break
        end -= 1
    return line[:end]


def _translate_class(body: str, negate: bool) -> str:
    items: list[str] = []
    for k, ch in enumerate(body):
        if ch == "-" and 0 < k < len(body) - 1:
            items.append("-")  # range
        else:
            items.append(re.escape(ch))
    return "[" + ("^" if negate else "") + "".join(items) + "]"


def translate_segment(segment: str) -> re.Pattern[str]:
    """Compile one path-segment glob to a regex matched against a whole segment.

    "*" is any run of characters, "?" is one character, "[...]" is a class
    ("[!...]" or "[^...]" negated), and a backslash makes the next character
    literal, so "\\#notes" matches a file named "#notes".
    """
    out: list[str] = []
    i, n = 0, len(segment)
    while i < n:
        c = segment[i]
        i += 1
        if c == "\\":
            if i < n:
                out.append(re.escape(segment[i]))
                i += 1
            else:
                out.append(re.escape(c))
        elif c == "*":
            while i < n and segment[i] == "*":
                i += 1
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = i
            if j < n and segment[j] in "!^":
                j += 1
            if j < n and segment[j] == "]":
                j += 1
            while j < n and segment[j] != "]":
                j += 1
            if j >= n:
                out.append(re.escape(c))  # unterminated: literal "["
                continue
            body = segment[i:j]
            i = j + 1
            negate = body[:1] in ("!", "^")
            out.append(_translate_class(body[1:] if negate else body, negate))
        else:
            out.append(re.escape(c))
    return re.compile("".join(out), re.DOTALL)


def _match_parts(
    matchers: Sequence[re.Pattern[str] | None],
    pi: int,
    parts: Sequence[str],
    si: int,
) -> bool:
    """Match pattern segments from pi against path segments from si to the end.

    A None matcher stands for "**".
    """
    while pi < len(matchers):
        matcher = matchers[pi]
        if matcher is None:
            if pi == len(matchers) - 1:
                # trailing "/**" needs at least one segment below
                return si < len(parts)
            return any(
                _match_parts(matchers, pi + 1, parts, k) for k in range(si, len(parts) + 1)
            )
        if si >= len(parts) or not matcher.fullmatch(parts[si]):
            return False
        pi += 1
        si += 1
    return si == len(parts)


@dataclass(frozen=True)
class IgnoreRule:
    pattern: str  # the line as written, trailing whitespace trimmed
    negated: bool
    directory_only: bool
    anchored: bool
    segments: tuple[str, ...]
    matchers: tuple[re.Pattern[str] | None, ...] = field(repr=False, compare=False)

    def matches(self, parts: Sequence[str], is_dir: bool) -> bool:
        """Check this rule's pattern against a path split into segments."""
        if not parts or (self.directory_only and not is_dir):
            return False
        if self.anchored:
            return _match_parts(self.matchers, 0, parts, 0)
        return any(_match_parts(self.matchers, 0, parts, start) for start in range(len(parts)))


def parse_rule(line: str) -> IgnoreRule | None:
    """Compile one ignore-file line. Returns None for blank and comment lines."""
    text = _trim_trailing_whitespace(line.rstrip("\n").rstrip("\r"))
    if not text.strip() or text.lstrip().startswith("#"):
        return None
    raw = text

    negated = text.startswith("!")
    if negated:
        text = text[1:]

    directory_only = text.endswith("/")
    if directory_only:
        text = text.rstrip("/")

    anchored = text.startswith("/")
    if anchored:
        text = text.lstrip("/")

    segments: list[str] = []
    for seg in text.split("/"):
        if not seg:
            continue
        if seg == DOUBLE_STAR and segments and segments[-1] == DOUBLE_STAR:
            continue
        segments.append(seg)
    if not segments:
        return None

    try:
        matchers = tuple(None if s == DOUBLE_STAR else translate_segment(s) for s in segments)
    except re.error as e:
        # e.g. a reversed range "[z-a]": git keeps the line but it never matches
        logger.debug("Ignore pattern %r never matches: %s", raw, e)
        matchers = (NEVER_MATCHES,)
    return IgnoreRule(
        pattern=raw,
        negated=negated,
        directory_only=directory_only,
        anchored=anchored,
        segments=tuple(segments),
        matchers=matchers,
    )


@dataclass(frozen=True)
class IgnoreSet:
    """Ordered, immutable rule sequence with last-match-wins decisions."""

    rules: tuple[IgnoreRule, ...] = ()

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[IgnoreRule]:
        return iter(self.rules)

    def _decide(self, parts: Sequence[str], is_dir: bool) -> bool:
        for rule in reversed(self.rules):
            if rule.matches(parts, is_dir):
                return not rule.negated
        return False

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Decide a single path from the rules alone, ignoring its ancestors.

        This is the test the scanner applies to each entry of a directory it
        has already decided to descend into.
        """
        parts = to_posix_relative(relative_path).split("/")
        if parts == [""]:
            return False
        return self._decide(parts, is_dir)

    def excludes(self, relative_path: str, is_dir: bool) -> bool:
        """Check whether a root-relative path is excluded.

        A path is excluded if any ancestor directory is excluded, or if the
        last matching rule for the path itself is not negated. The root
        itself ("" or ".") is never excluded.
        """
        parts = to_posix_relative(relative_path).split("/")
        if parts == [""]:
            return False
        for depth in range(1, len(parts)):
            if self._decide(parts[:depth], True):
                return True
        return self._decide(parts, is_dir)


def compile_patterns(pattern_lines: str | Iterable[str]) -> IgnoreSet:
    """Compile ignore-file lines (or whole file content) into an IgnoreSet."""
    if isinstance(pattern_lines, str):
        pattern_lines = pattern_lines.split("\n")
    rules = []
    for line in pattern_lines:
        rule = parse_rule(line)
        if rule is not None:
            rules.append(rule)
    return IgnoreSet(tuple(rules))


def load_ignore_file(path: str) -> IgnoreSet:
    """Read and compile an ignore file. Missing or unreadable -> empty set."""
    try:
        with open(path, encoding="utf-8-sig") as f:
            content = f.read()
    except FileNotFoundError:
        logger.debug("No ignore file at %s", path)
        return IgnoreSet()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Ignore file %s unreadable, nothing excluded: %s", path, e)
        return IgnoreSet()

    ignore_set = compile_patterns(content)
    logger.debug("Compiled %d ignore rules from %s", len(ignore_set), path)
    return ignore_set
