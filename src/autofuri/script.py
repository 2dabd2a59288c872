from __future__ import annotations

__all__ = [
    "NO_READING",
    "is_kanji",
    "is_kana",
    "is_japanese_char",
    "has_kanji",
    "katakana_to_hiragana",
    "hiragana_to_katakana",
    "normalize_reading",
]

# Placeholder MeCab-style dictionaries emit when a token has no reading.
NO_READING = "*"

_PROLONGED_SOUND_MARK = "ー"


def is_kanji(ch: str) -> bool:
    if not ch:
        return False
    code = ord(ch[0])
    return (
        0x4E00 <= code <= 0x9FFF
        or 0x3400 <= code <= 0x4DBF
        or 0xF900 <= code <= 0xFAFF
    )


def is_kana(ch: str) -> bool:
    if not ch:
        return False
    code = ord(ch[0])
    return 0x3040 <= code <= 0x30FF or ch[0] == _PROLONGED_SOUND_MARK


def is_japanese_char(ch: str) -> bool:
    return is_kana(ch) or is_kanji(ch)


def has_kanji(text: str) -> bool:
    return any(is_kanji(ch) for ch in text)


def katakana_to_hiragana(text: str) -> str:
    result = []
    for ch in text:
        code = ord(ch)
        if 0x30A1 <= code <= 0x30F6:
            result.append(chr(code - 0x60))
        elif ch == "ヽ":
            result.append("ゝ")
        elif ch == "ヾ":
            result.append("ゞ")
        else:
            result.append(ch)
    return "".join(result)


def hiragana_to_katakana(text: str) -> str:
    result = []
    for ch in text:
        code = ord(ch)
        if 0x3041 <= code <= 0x3096:
            result.append(chr(code + 0x60))
        elif ch == "ゝ":
            result.append("ヽ")
        elif ch == "ゞ":
            result.append("ヾ")
        else:
            result.append(ch)
    return "".join(result)


def normalize_reading(raw: str | None, fallback: str) -> str:
    """
    Return the hiragana form of a tokenizer reading.

    Missing readings (``None``, empty, or the ``*`` placeholder) fall back to
    the surface form, which is correct for punctuation and text that is
    already kana.
    """
    if not raw or raw == NO_READING:
        return katakana_to_hiragana(fallback)
    return katakana_to_hiragana(raw)
