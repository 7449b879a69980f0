"""Restrict invocation records to a snapshot's package globs.

Patterns are Ant-style globs over '.'-separated segments:

    com.foo.*        -> Bar, Baz ... directly in com.foo (and everything below them)
    com.**.api       -> any api package under com
    com.foo.Ba?      -> one character wildcard inside a segment

A pattern selects a signature when it matches the whole dotted path or any
leading run of its segments, so naming a package selects its contents.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..exceptions import InvalidFilterPattern
from ..logging_config import get_logger
from ..models import InvocationRecord

logger = get_logger(__name__)

SEGMENT_SEPARATOR = "."
GLOBSTAR = "**"


def _segment_regex(segment: str) -> re.Pattern:
    parts = []
    for ch in segment:
        if ch == "*":
            parts.append("[^.]*")
        elif ch == "?":
            parts.append("[^.]")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts))


@dataclass(frozen=True)
class PathPattern:
    """One compiled glob; ``None`` entries in ``segments`` stand for ``**``."""

    source: str
    segments: tuple

    @classmethod
    def compile(cls, pattern: str) -> "PathPattern":
        segments = []
        for raw in pattern.split(SEGMENT_SEPARATOR):
            if not raw:
                raise InvalidFilterPattern(pattern, "empty path segment")
            if GLOBSTAR in raw:
                if raw != GLOBSTAR:
                    raise InvalidFilterPattern(pattern, f"'**' must be a whole segment, got {raw!r}")
                # consecutive '**' behave like one
                if segments and segments[-1] is None:
                    continue
                segments.append(None)
            else:
                segments.append(_segment_regex(raw))
        return cls(source=pattern, segments=tuple(segments))

    def matches(self, path: str) -> bool:
        """True if the pattern matches ``path`` or one of its leading segment runs."""
        names = path.split(SEGMENT_SEPARATOR)
        pattern = self.segments

        # reachable[j]: pattern prefix consumed so far can end at path position j
        reachable = {0}
        for seg in pattern:
            if not reachable:
                return False
            if seg is None:
                start = min(reachable)
                reachable = set(range(start, len(names) + 1))
            else:
                reachable = {j + 1 for j in reachable if j < len(names) and seg.fullmatch(names[j])}
        # any end position is fine: trailing segments are descendants
        return bool(reachable)


def compile_patterns(packages: str) -> list[PathPattern]:
    """Parse a comma-separated filter string.

    Whitespace is removed everywhere and empty entries are ignored.

    Raises:
        InvalidFilterPattern: if any entry is malformed.
    """
    cleaned = "".join(packages.split())
    return [PathPattern.compile(p) for p in cleaned.split(",") if p]


def normalize_signature(signature: str) -> str:
    return signature.replace("$", SEGMENT_SEPARATOR)


def matches_any(signature: str, patterns: Sequence[PathPattern]) -> bool:
    path = normalize_signature(signature)
    return any(p.matches(path) for p in patterns)


def filter_records(
    records: Iterable[InvocationRecord], packages: str
) -> Sequence[InvocationRecord]:
    """Keep the records whose signature matches at least one package glob.

    An empty or blank ``packages`` string returns the input unchanged; a
    non-blank one with no entries (``","``) matches nothing. Patterns are
    compiled before any record is looked at, so a bad filter fails fast.
    """
    if not packages or not packages.strip():
        return records if isinstance(records, Sequence) else list(records)

    # a filter of only commas has no patterns and keeps nothing
    patterns = compile_patterns(packages)
    kept = [r for r in records if matches_any(r.signature, patterns)]
    logger.debug(
        "Package filter %r kept %d record(s)", ",".join(p.source for p in patterns), len(kept)
    )
    return kept
