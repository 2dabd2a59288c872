from __future__ import annotations

from dataclasses import dataclass

from .script import is_kana, katakana_to_hiragana

__all__ = [
    "KanaRun",
    "OkuriganaSplit",
    "split_okurigana",
]


@dataclass(frozen=True)
class KanaRun:
    base: str = ""
    reading: str = ""


@dataclass(frozen=True)
class OkuriganaSplit:
    """
    One token split into ``prefix`` kana, the kanji ``base`` and ``suffix`` kana.

    ``prefix.base + base + suffix.base`` always reproduces the surface form.
    """

    base: str
    base_reading: str
    prefix: KanaRun
    suffix: KanaRun


def split_okurigana(surface: str, reading_hira: str) -> OkuriganaSplit:
    """
    Peel kana off both ends of ``surface`` while they match the reading.

    Leading kana are consumed while the remaining reading starts with their
    hiragana form (お願い -> お + 願い), trailing kana while it ends with it
    (食べる -> 食 + べる). Whatever is left in the middle is the kanji core and
    takes the leftover reading. Kana inside the core that happen to match the
    reading edge can be mis-assigned; that approximation is kept as is.
    """
    remaining = reading_hira
    i = 0
    prefix_base: list[str] = []
    prefix_read: list[str] = []
    while i < len(surface):
        ch = surface[i]
        if not is_kana(ch):
            break
        hira = katakana_to_hiragana(ch)
        if not remaining.startswith(hira):
            break
        prefix_base.append(ch)
        prefix_read.append(hira)
        remaining = remaining[len(hira):]
        i += 1

    j = len(surface) - 1
    suffix_base: list[str] = []
    suffix_read: list[str] = []
    while j >= i:
        ch = surface[j]
        if not is_kana(ch):
            break
        hira = katakana_to_hiragana(ch)
        if not remaining.endswith(hira):
            break
        suffix_base.insert(0, ch)
        suffix_read.insert(0, hira)
        remaining = remaining[: len(remaining) - len(hira)]
        j -= 1

    return OkuriganaSplit(
        base=surface[i : j + 1],
        base_reading=remaining,
        prefix=KanaRun("".join(prefix_base), "".join(prefix_read)),
        suffix=KanaRun("".join(suffix_base), "".join(suffix_read)),
    )
