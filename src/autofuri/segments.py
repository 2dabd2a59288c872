from __future__ import annotations

from typing import Protocol, Sequence

from .logging_utils import debug_log
from .okurigana import split_okurigana
from .script import has_kanji, normalize_reading
from .tokens import AlignedSegment, Token

__all__ = [
    "SupportsTokenize",
    "build_segment",
    "build_segments",
]


class SupportsTokenize(Protocol):
    def tokenize(self, text: str) -> Sequence[Token]:
        ...


def _tokens_for(text: str, tokenizer: SupportsTokenize | None) -> Sequence[Token]:
    if tokenizer is None:
        return [Token(surface=text, reading=None)]
    return tokenizer.tokenize(text)


def build_segment(text: str, tokenizer: SupportsTokenize | None = None) -> AlignedSegment:
    """
    Split ``text`` into aligned base/reading chunks.

    Each token contributes its leading kana, kanji core and trailing kana as
    separate chunks; kana-only tokens pass through whole. Without a tokenizer
    the entire string is treated as one token with no reading.
    """
    if not text:
        return AlignedSegment()

    pairs: list[tuple[str, str]] = []
    for token in _tokens_for(text, tokenizer):
        surface = token.surface or ""
        if not surface:
            continue
        reading = normalize_reading(token.reading, surface)

        if not has_kanji(surface):
            pairs.append((surface, reading))
            continue

        split = split_okurigana(surface, reading)
        if split.prefix.base:
            pairs.append((split.prefix.base, split.prefix.reading))
        if split.base:
            pairs.append((split.base, split.base_reading or reading))
        if split.suffix.base:
            pairs.append((split.suffix.base, split.suffix.reading))

    if not pairs:
        debug_log(f"no chunks produced for {text!r}; using whole-string fallback")
        return AlignedSegment((text,), (normalize_reading(None, text),))
    return AlignedSegment.from_pairs(pairs)


def build_segments(text: str, tokenizer: SupportsTokenize | None = None) -> list[AlignedSegment]:
    return [build_segment(text, tokenizer)]
