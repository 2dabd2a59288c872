from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

__all__ = [
    "Token",
    "AlignedSegment",
    "Interval",
    "ExclusionZone",
    "Origin",
    "Candidate",
    "ResolvedSpan",
    "serialize_resolved_spans",
    "deserialize_resolved_spans",
]


@dataclass(frozen=True)
class Token:
    """One morpheme as reported by the tokenizer; ``reading`` may be missing."""

    surface: str
    reading: str | None = None


@dataclass(frozen=True)
class AlignedSegment:
    """
    Parallel base/reading chunks for one span of text.

    ``base_chunks[i]`` is read as ``reading_chunks[i]``. Chunks without kanji
    still carry their kana as the reading so both sides stay paired; renderers
    decide whether to show it.
    """

    base_chunks: tuple[str, ...] = ()
    reading_chunks: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(self.base_chunks) != len(self.reading_chunks):
            raise ValueError(
                f"Unaligned segment: {len(self.base_chunks)} base chunks "
                f"vs {len(self.reading_chunks)} readings."
            )

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "AlignedSegment":
        bases: list[str] = []
        readings: list[str] = []
        for base, reading in pairs:
            bases.append(base)
            readings.append(reading)
        return cls(tuple(bases), tuple(readings))

    def pairs(self) -> list[tuple[str, str]]:
        return list(zip(self.base_chunks, self.reading_chunks))

    @property
    def text(self) -> str:
        return "".join(self.base_chunks)

    def __len__(self) -> int:
        return len(self.base_chunks)


@dataclass(frozen=True)
class Interval:
    """Half-open ``[start, end)`` range of offsets into the source text."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Empty or inverted interval [{self.start}, {self.end}).")

    def overlaps(self, other: "Interval | ExclusionZone") -> bool:
        return self.start < other.end and other.start < self.end

    def shifted(self, offset: int) -> "Interval":
        return Interval(self.start + offset, self.end + offset)


@dataclass(frozen=True)
class ExclusionZone:
    """
    Region that must never be replaced: a selection, or inline/fenced code.

    Unlike :class:`Interval` it may be empty, so a bare cursor strictly inside
    a span still protects that span.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Inverted exclusion zone [{self.start}, {self.end}).")

    @classmethod
    def from_selection(cls, anchor: int, head: int) -> "ExclusionZone":
        return cls(min(anchor, head), max(anchor, head))


class Origin(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"


@dataclass(frozen=True)
class Candidate:
    interval: Interval
    segment: AlignedSegment
    origin: Origin


@dataclass(frozen=True)
class ResolvedSpan:
    interval: Interval
    segment: AlignedSegment
    origin: Origin

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end


def serialize_resolved_spans(spans: Iterable[ResolvedSpan]) -> list[dict[str, object]]:
    payload: list[dict[str, object]] = []
    for span in spans:
        entry: dict[str, object] = {
            "start": span.interval.start,
            "end": span.interval.end,
            "origin": span.origin.value,
            "base": list(span.segment.base_chunks),
            "reading": list(span.segment.reading_chunks),
        }
        payload.append(entry)
    return payload


def deserialize_resolved_spans(data: Iterable[Mapping[str, object]]) -> list[ResolvedSpan]:
    spans: list[ResolvedSpan] = []
    for entry in data:
        if not isinstance(entry, Mapping):
            continue
        start = entry.get("start")
        end = entry.get("end")
        if not isinstance(start, int) or not isinstance(end, int) or start >= end:
            continue
        try:
            origin = Origin(entry.get("origin"))
        except ValueError:
            continue
        base = entry.get("base")
        reading = entry.get("reading")
        if not isinstance(base, list) or not isinstance(reading, list):
            continue
        if len(base) != len(reading):
            continue
        if not all(isinstance(item, str) for item in base + reading):
            continue
        spans.append(
            ResolvedSpan(
                interval=Interval(start, end),
                segment=AlignedSegment(tuple(base), tuple(reading)),
                origin=origin,
            )
        )
    return spans
