from __future__ import annotations

from typing import Iterable, Sequence

from .tokens import Candidate, ExclusionZone, Interval, ResolvedSpan

__all__ = [
    "overlaps",
    "resolve",
]


def overlaps(a: Interval | ExclusionZone, b: Interval | ExclusionZone) -> bool:
    return a.start < b.end and b.start < a.end


def _is_free(interval: Interval, zones: Sequence[Interval | ExclusionZone]) -> bool:
    for zone in zones:
        if overlaps(interval, zone):
            return False
    return True


def resolve(
    manual: Iterable[Candidate],
    automatic: Iterable[Candidate],
    exclusions: Iterable[ExclusionZone | Interval] = (),
) -> list[ResolvedSpan]:
    """
    Merge manual and automatic candidates into the spans to render.

    Anything touching an exclusion is dropped. Automatic candidates touching
    a manual override are dropped even when that override was itself excluded,
    so the raw markup under a selection is never partially annotated. The
    survivors are returned ordered by ``(start, end)``; manual matches are
    disjoint and automatic matches are disjoint by construction, so the
    result never overlaps.
    """
    zones = list(exclusions)
    manual_list = list(manual)
    manual_intervals = [candidate.interval for candidate in manual_list]

    survivors: list[Candidate] = [
        candidate for candidate in manual_list if _is_free(candidate.interval, zones)
    ]
    for candidate in automatic:
        if not _is_free(candidate.interval, zones):
            continue
        if not _is_free(candidate.interval, manual_intervals):
            continue
        survivors.append(candidate)

    survivors.sort(key=lambda item: (item.interval.start, item.interval.end))
    return [
        ResolvedSpan(interval=item.interval, segment=item.segment, origin=item.origin)
        for item in survivors
    ]
