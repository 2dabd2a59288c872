from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .logging_utils import debug_log
from .nlp import TokenizerHandle
from .notation import NotationStyle, iter_automatic_matches, iter_manual_candidates
from .resolver import resolve
from .segments import SupportsTokenize, build_segment
from .settings import Settings
from .tokens import AlignedSegment, Candidate, ExclusionZone, Interval, Origin, ResolvedSpan

__all__ = [
    "FENCE_MARKER",
    "FuriganaEngine",
    "LineCandidates",
    "annotate_text",
    "inline_code_ranges",
    "iter_lines_with_positions",
]

FENCE_MARKER = "```"

SelectionLike = ExclusionZone | Interval | tuple[int, int]


@dataclass
class LineCandidates:
    manual: list[Candidate] = field(default_factory=list)
    automatic: list[Candidate] = field(default_factory=list)
    exclusions: list[ExclusionZone] = field(default_factory=list)


def iter_lines_with_positions(text: str) -> Iterable[tuple[str, int, int]]:
    """Yield ``(line, start, end)`` for each line split on LF, minus one trailing CR."""
    cursor = 0
    for raw in text.split("\n"):
        line = raw[:-1] if raw.endswith("\r") else raw
        yield line, cursor, cursor + len(line)
        cursor += len(raw) + 1


def inline_code_ranges(line: str) -> list[tuple[int, int]]:
    """Pair backticks left to right; an unmatched trailing backtick opens nothing."""
    ranges: list[tuple[int, int]] = []
    opened: int | None = None
    for idx, ch in enumerate(line):
        if ch != "`":
            continue
        if opened is None:
            opened = idx
        else:
            ranges.append((opened, idx + 1))
            opened = None
    return ranges


def _as_zone(selection: SelectionLike) -> ExclusionZone:
    if isinstance(selection, ExclusionZone):
        return selection
    if isinstance(selection, Interval):
        return ExclusionZone(selection.start, selection.end)
    anchor, head = selection
    return ExclusionZone.from_selection(anchor, head)


class FuriganaEngine:
    """
    Turns text into the ordered, non-overlapping spans a renderer replaces.

    ``tokenizer`` may be a built tokenizer, a :class:`TokenizerHandle`, or
    ``None``. A handle that has not finished building is treated like a
    missing tokenizer, so output degrades instead of blocking.
    """

    def __init__(
        self,
        tokenizer: SupportsTokenize | TokenizerHandle | None = None,
        notation: NotationStyle | str = NotationStyle.CURLY,
        *,
        editing_mode: bool = True,
        reading_mode: bool = True,
    ) -> None:
        self._tokenizer = tokenizer
        self.notation = NotationStyle.coerce(notation)
        self.editing_mode = editing_mode
        self.reading_mode = reading_mode

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        tokenizer: SupportsTokenize | TokenizerHandle | None = None,
    ) -> "FuriganaEngine":
        return cls(
            tokenizer=tokenizer,
            notation=settings.notation_style,
            editing_mode=settings.editing_mode,
            reading_mode=settings.reading_mode,
        )

    def with_notation(self, notation: NotationStyle | str) -> "FuriganaEngine":
        return FuriganaEngine(
            tokenizer=self._tokenizer,
            notation=notation,
            editing_mode=self.editing_mode,
            reading_mode=self.reading_mode,
        )

    @property
    def tokenizer(self) -> SupportsTokenize | None:
        if isinstance(self._tokenizer, TokenizerHandle):
            return self._tokenizer.peek()
        return self._tokenizer

    def segment(self, text: str) -> AlignedSegment:
        return build_segment(text, self.tokenizer)

    def candidates_for_line(
        self,
        line: str,
        offset: int = 0,
        *,
        code_aware: bool = True,
    ) -> LineCandidates:
        result = LineCandidates()
        result.manual.extend(iter_manual_candidates(line, self.notation, offset))
        for interval, span in iter_automatic_matches(line, offset):
            result.automatic.append(
                Candidate(interval=interval, segment=self.segment(span), origin=Origin.AUTOMATIC)
            )
        if code_aware:
            for start, end in inline_code_ranges(line):
                result.exclusions.append(ExclusionZone(start + offset, end + offset))
        return result

    def _scan(
        self,
        lines: Iterable[tuple[str, int, int]],
        selections: Iterable[SelectionLike],
        code_aware: bool,
    ) -> list[ResolvedSpan]:
        manual: list[Candidate] = []
        automatic: list[Candidate] = []
        exclusions: list[ExclusionZone] = [_as_zone(item) for item in selections]
        inside_fence = False
        for line, start, end in lines:
            if code_aware:
                if line.strip().startswith(FENCE_MARKER):
                    inside_fence = not inside_fence
                    exclusions.append(ExclusionZone(start, end))
                    continue
                if inside_fence:
                    exclusions.append(ExclusionZone(start, end))
                    continue
            found = self.candidates_for_line(line, start, code_aware=code_aware)
            manual.extend(found.manual)
            automatic.extend(found.automatic)
            exclusions.extend(found.exclusions)
        spans = resolve(manual, automatic, exclusions)
        debug_log(
            f"resolved {len(spans)} spans from {len(manual)} manual / "
            f"{len(automatic)} automatic candidates, {len(exclusions)} exclusions"
        )
        return spans

    def annotate(
        self,
        text: str,
        selections: Iterable[SelectionLike] = (),
        *,
        code_aware: bool = True,
    ) -> list[ResolvedSpan]:
        """
        Resolve every span of ``text`` in one pass.

        With ``code_aware`` set, Markdown inline code and fenced blocks are
        left untouched. ``selections`` are protected ranges such as the
        caret or a highlighted region.
        """
        return self._scan(iter_lines_with_positions(text), selections, code_aware)

    def annotate_viewport(
        self,
        text: str,
        visible_ranges: Sequence[tuple[int, int]],
        selections: Iterable[SelectionLike] = (),
    ) -> list[ResolvedSpan]:
        """
        Resolve only the lines touched by ``visible_ranges``.

        Called again from scratch whenever the document, viewport or
        selection changes. Returns nothing when editing mode is off. Fence
        tracking starts fresh on every call and only sees the visible lines.
        """
        if not self.editing_mode:
            return []
        lines = list(iter_lines_with_positions(text))
        wanted: list[int] = []
        seen: set[int] = set()
        for range_start, range_end in visible_ranges:
            for idx, (_, start, end) in enumerate(lines):
                if end < range_start or start > range_end:
                    continue
                if idx not in seen:
                    seen.add(idx)
                    wanted.append(idx)
        wanted.sort()
        return self._scan((lines[idx] for idx in wanted), selections, code_aware=True)


def annotate_text(
    text: str,
    notation: NotationStyle | str = NotationStyle.CURLY,
    tokenizer: SupportsTokenize | TokenizerHandle | None = None,
    selections: Iterable[SelectionLike] = (),
) -> list[ResolvedSpan]:
    return FuriganaEngine(tokenizer=tokenizer, notation=notation).annotate(text, selections)
