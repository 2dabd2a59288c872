"""
Inline manual overrides and the broad Japanese span detector.

Two bracket styles are recognised:

    curly:  {漢字|かん|じ}
    square: [漢字|かん|じ]

Every manual pattern exposes the same groups, which callers rely on:

    1. base     - text between the opening bracket and the first ``|``
    2. readings - the whole tail including the leading pipe, e.g. ``|かん|じ``

Neither part may contain the bracket characters, ``|`` or a line break.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterator

from .tokens import AlignedSegment, Candidate, Interval, Origin

__all__ = [
    "NotationStyle",
    "manual_pattern",
    "automatic_pattern",
    "align_manual_readings",
    "iter_manual_candidates",
    "iter_automatic_matches",
]

_CURLY_SOURCE = r"\{([^{}|\r\n]+)((?:\|[^{}|\r\n]+)+)\}"
_SQUARE_SOURCE = r"\[([^\[\]|\r\n]+)((?:\|[^\[\]|\r\n]+)+)\]"
# Never matches.
_NEVER_SOURCE = r"(?!)"
# Hiragana, katakana, CJK ideographs (ext. A, unified, compatibility) and ー.
_AUTOMATIC_SOURCE = r"[\u3040-\u309F\u30A0-\u30FF\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFFー]+"


class NotationStyle(str, Enum):
    CURLY = "curly"
    SQUARE = "square"
    NONE = "none"

    @classmethod
    def coerce(cls, value: "NotationStyle | str | None") -> "NotationStyle":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.NONE
        return cls.NONE


def manual_pattern(style: NotationStyle | str) -> re.Pattern[str]:
    """Compile the override pattern for ``style``; unknown styles never match."""
    style = NotationStyle.coerce(style)
    if style is NotationStyle.CURLY:
        return re.compile(_CURLY_SOURCE)
    if style is NotationStyle.SQUARE:
        return re.compile(_SQUARE_SOURCE)
    return re.compile(_NEVER_SOURCE)


def automatic_pattern() -> re.Pattern[str]:
    return re.compile(_AUTOMATIC_SOURCE)


def align_manual_readings(base: str, tail: str) -> AlignedSegment:
    """
    Pair an override's base with its ``|``-separated readings.

    A single reading covers the whole base. Several readings are assigned one
    per character; when the counts differ, characters past the last reading
    reuse it, and surplus readings are ignored.
    """
    parts = tail.split("|")[1:]
    if len(parts) <= 1:
        reading = parts[0] if parts else ""
        return AlignedSegment((base,), (reading,))

    chars = tuple(base)
    if len(parts) == len(chars):
        return AlignedSegment(chars, tuple(parts))
    readings = tuple(parts[idx] if idx < len(parts) else parts[-1] for idx in range(len(chars)))
    return AlignedSegment(chars, readings)


def iter_manual_candidates(
    text: str,
    style: NotationStyle | str,
    offset: int = 0,
) -> Iterator[Candidate]:
    for match in manual_pattern(style).finditer(text):
        segment = align_manual_readings(match.group(1), match.group(2))
        yield Candidate(
            interval=Interval(match.start(), match.end()).shifted(offset),
            segment=segment,
            origin=Origin.MANUAL,
        )


def iter_automatic_matches(text: str, offset: int = 0) -> Iterator[tuple[Interval, str]]:
    for match in automatic_pattern().finditer(text):
        yield Interval(match.start(), match.end()).shifted(offset), match.group(0)
