from __future__ import annotations

import pytest

from autofuri.core import FuriganaEngine, annotate_text, inline_code_ranges, iter_lines_with_positions
from autofuri.nlp import TokenizerHandle
from autofuri.notation import NotationStyle
from autofuri.settings import Settings
from autofuri.tokens import ExclusionZone, Interval, Origin


def _bounds(spans) -> list[tuple[int, int, str]]:
    return [(s.start, s.end, s.origin.value) for s in spans]


def test_mixed_text_resolves_manual_and_automatic_spans(stub_tokenizer) -> None:
    text = "これは{漢字|かん|じ}です"
    spans = FuriganaEngine(stub_tokenizer).annotate(text)
    assert _bounds(spans) == [
        (0, 3, "automatic"),
        (3, 12, "manual"),
        (12, 14, "automatic"),
    ]
    assert spans[1].segment.pairs() == [("漢", "かん"), ("字", "じ")]
    assert spans[0].segment.text == "これは"


def test_automatic_span_carries_okurigana_split(stub_tokenizer) -> None:
    [span] = FuriganaEngine(stub_tokenizer).annotate("お願いします")
    assert span.interval == Interval(0, 6)
    assert span.origin is Origin.AUTOMATIC
    assert span.segment.pairs() == [
        ("お", "お"),
        ("願", "ねが"),
        ("い", "い"),
        ("し", "し"),
        ("ます", "ます"),
    ]


def test_fenced_block_is_left_alone(stub_tokenizer) -> None:
    text = "```\n漢字\n```\n日本"
    spans = FuriganaEngine(stub_tokenizer).annotate(text)
    assert _bounds(spans) == [(11, 13, "automatic")]
    assert text[11:13] == "日本"


def test_unterminated_fence_excludes_the_rest(stub_tokenizer) -> None:
    spans = FuriganaEngine(stub_tokenizer).annotate("日本\n```python\n{漢字|かんじ}\n東京")
    assert _bounds(spans) == [(0, 2, "automatic")]


def test_inline_code_is_excluded(stub_tokenizer) -> None:
    spans = FuriganaEngine(stub_tokenizer).annotate("`漢字` 日本")
    assert _bounds(spans) == [(5, 7, "automatic")]


def test_manual_override_inside_inline_code_is_excluded(stub_tokenizer) -> None:
    assert FuriganaEngine(stub_tokenizer).annotate("`{漢字|かんじ}`") == []


def test_code_awareness_can_be_disabled(stub_tokenizer) -> None:
    spans = FuriganaEngine(stub_tokenizer).annotate("`漢字`", code_aware=False)
    assert _bounds(spans) == [(1, 3, "automatic")]


def test_caret_inside_span_hides_it(stub_tokenizer) -> None:
    engine = FuriganaEngine(stub_tokenizer)
    text = "漢字 日本"
    assert _bounds(engine.annotate(text, [(1, 1)])) == [(3, 5, "automatic")]
    assert _bounds(engine.annotate(text, [(0, 0)])) == [(0, 2, "automatic"), (3, 5, "automatic")]
    assert _bounds(engine.annotate(text, [ExclusionZone(4, 4)])) == [(0, 2, "automatic")]


def test_backwards_selection_is_normalized(stub_tokenizer) -> None:
    spans = FuriganaEngine(stub_tokenizer).annotate("漢字 日本", [(4, 1)])
    assert spans == []


def test_viewport_only_scans_visible_lines(stub_tokenizer) -> None:
    engine = FuriganaEngine(stub_tokenizer)
    text = "漢字\n日本\n東京"
    spans = engine.annotate_viewport(text, [(3, 5)])
    assert _bounds(spans) == [(3, 5, "automatic")]
    assert stub_tokenizer.calls == ["日本"]


def test_viewport_merges_overlapping_ranges(stub_tokenizer) -> None:
    engine = FuriganaEngine(stub_tokenizer)
    text = "漢字\n日本\n東京"
    spans = engine.annotate_viewport(text, [(6, 8), (0, 4), (3, 3)])
    assert [s.start for s in spans] == [0, 3, 6]
    assert engine.annotate_viewport(text, [(6, 8), (0, 4)]) == engine.annotate(text)


def test_annotation_is_idempotent(stub_tokenizer) -> None:
    engine = FuriganaEngine(stub_tokenizer)
    text = "今日は{東京|とう|きょう}に行く\n`code` 日本語"
    assert engine.annotate(text) == engine.annotate(text)


def test_disabled_notation_treats_overrides_as_plain_text(stub_tokenizer) -> None:
    engine = FuriganaEngine(stub_tokenizer, notation="none")
    spans = engine.annotate("{漢字|かんじ}")
    assert [s.origin for s in spans] == [Origin.AUTOMATIC, Origin.AUTOMATIC]
    assert [(s.start, s.end) for s in spans] == [(1, 3), (4, 7)]


def test_with_notation_keeps_tokenizer(stub_tokenizer) -> None:
    engine = FuriganaEngine(stub_tokenizer).with_notation(NotationStyle.SQUARE)
    assert engine.notation is NotationStyle.SQUARE
    assert engine.tokenizer is stub_tokenizer
    spans = engine.annotate("[日本|にっぽん]")
    assert spans[0].segment.reading_chunks == ("にっぽん",)


def test_from_settings_uses_notation_style(stub_tokenizer) -> None:
    settings = Settings(notation_style=NotationStyle.SQUARE)
    engine = FuriganaEngine.from_settings(settings, stub_tokenizer)
    assert engine.notation is NotationStyle.SQUARE


def test_unbuilt_handle_degrades_to_plain_readings() -> None:
    handle = TokenizerHandle(factory=lambda: pytest.fail("should not build"))
    engine = FuriganaEngine(handle)
    [span] = engine.annotate("漢字")
    assert span.segment.pairs() == [("漢字", "漢字")]
    assert not handle.ready


def test_built_handle_is_used(stub_tokenizer) -> None:
    handle = TokenizerHandle(factory=lambda: stub_tokenizer)
    handle.get()
    [span] = FuriganaEngine(handle).annotate("漢字")
    assert span.segment.pairs() == [("漢字", "かんじ")]


def test_annotate_text_shortcut(stub_tokenizer) -> None:
    spans = annotate_text("{日本|にほん}語", tokenizer=stub_tokenizer)
    assert _bounds(spans) == [(0, 8, "manual"), (8, 9, "automatic")]


def test_line_positions_skip_line_terminators() -> None:
    lines = list(iter_lines_with_positions("ab\r\ncd\n\nef"))
    assert lines == [("ab", 0, 2), ("cd", 4, 6), ("", 7, 7), ("ef", 8, 10)]


def test_inline_code_ranges_pair_backticks() -> None:
    assert inline_code_ranges("a `b` c `d") == [(2, 5)]
    assert inline_code_ranges("``") == [(0, 2)]
    assert inline_code_ranges("none") == []


def test_candidates_for_line_reports_all_three_kinds(stub_tokenizer) -> None:
    found = FuriganaEngine(stub_tokenizer).candidates_for_line("{漢|かん}`x`日本", offset=10)
    assert [c.interval for c in found.manual] == [Interval(10, 16)]
    assert [c.interval for c in found.automatic] == [Interval(11, 12), Interval(13, 15), Interval(19, 21)]
    assert found.exclusions == [ExclusionZone(16, 19)]


def test_only_line_feeds_break_lines(stub_tokenizer) -> None:
    engine = FuriganaEngine(stub_tokenizer)
    spans = engine.annotate("日本\u2028```\n東京")
    assert _bounds(spans) == [(0, 2, "automatic"), (7, 9, "automatic")]
    assert [s.origin.value for s in engine.annotate("{漢\x0c字|かんじ}")] == ["manual"]
    assert [line for line, _, _ in iter_lines_with_positions("a\x0bb\x1cc d\r\ne")] == [
        "a\x0bb\x1cc d",
        "e",
    ]


def test_disabled_editing_mode_hides_viewport_spans(stub_tokenizer) -> None:
    settings = Settings(editing_mode=False)
    engine = FuriganaEngine.from_settings(settings, stub_tokenizer)
    assert engine.annotate_viewport("漢字\n日本", [(0, 5)]) == []
    assert stub_tokenizer.calls == []
    assert not engine.with_notation("square").editing_mode
    assert _bounds(engine.annotate("漢字")) == [(0, 2, "automatic")]
