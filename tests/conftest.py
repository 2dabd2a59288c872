from __future__ import annotations

import pytest

from autofuri.tokens import Token

_VOCAB = {
    "お願い": "オネガイ",
    "し": "シ",
    "ます": "マス",
    "これ": "コレ",
    "は": "ハ",
    "です": "デス",
    "漢字": "カンジ",
    "日本": "ニホン",
    "日本語": "ニホンゴ",
    "食べる": "タベル",
    "今日": "キョウ",
    "東京": "トウキョウ",
    "行く": "イク",
    "に": "ニ",
}


class _StubTokenizer:
    """Greedy longest-match tokenizer over a fixed vocabulary."""

    def __init__(self, vocab: dict[str, str] | None = None) -> None:
        self.vocab = dict(_VOCAB if vocab is None else vocab)
        self.calls: list[str] = []

    def tokenize(self, text: str) -> list[Token]:
        self.calls.append(text)
        tokens: list[Token] = []
        idx = 0
        longest = max((len(key) for key in self.vocab), default=1)
        while idx < len(text):
            for size in range(min(longest, len(text) - idx), 0, -1):
                piece = text[idx : idx + size]
                if piece in self.vocab:
                    tokens.append(Token(surface=piece, reading=self.vocab[piece]))
                    idx += size
                    break
            else:
                tokens.append(Token(surface=text[idx], reading=None))
                idx += 1
        return tokens


@pytest.fixture
def stub_tokenizer() -> _StubTokenizer:
    return _StubTokenizer()


@pytest.fixture(autouse=True)
def _isolated_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("AUTOFURI_CONFIG", raising=False)
    monkeypatch.delenv("AUTOFURI_NOTATION", raising=False)
