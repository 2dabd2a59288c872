from __future__ import annotations

from typing import Callable, Iterable, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag  # type: ignore

from .core import FuriganaEngine
from .notation import NotationStyle
from .script import has_kanji, is_japanese_char
from .tokens import Origin, ResolvedSpan

__all__ = [
    "CONTAINER_TAGS",
    "annotate_html",
    "make_ruby",
    "render_text",
    "to_markup",
]

# Content-bearing elements scanned by annotate_html.
CONTAINER_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "ol", "ul", "table")
_SKIP_TAGS = {"code", "pre", "script", "style", "ruby"}

_BRACKETS = {
    NotationStyle.CURLY: ("{", "}"),
    NotationStyle.SQUARE: ("[", "]"),
}


def make_ruby(soup: BeautifulSoup, base_chunks: Sequence[str], reading_chunks: Sequence[str]) -> Tag:
    """
    Build ``<ruby class="furi">`` with an explicit ``<rb>``/``<rt>`` per chunk.

    Chunks without kanji get an empty ``<rt>`` so every ``<rb>`` keeps its own
    annotation slot.
    """
    ruby = soup.new_tag("ruby", attrs={"class": "furi"})
    for base, reading in zip(base_chunks, reading_chunks):
        rb = soup.new_tag("rb")
        rb.string = base
        ruby.append(rb)
        rt = soup.new_tag("rt")
        rt.string = reading if base and has_kanji(base) else ""
        ruby.append(rt)
    return ruby


def _span_nodes(
    soup: BeautifulSoup,
    text: str,
    spans: Iterable[ResolvedSpan],
) -> tuple[list[NavigableString | Tag], bool]:
    nodes: list[NavigableString | Tag] = []
    changed = False
    cursor = 0
    for span in spans:
        if span.start > cursor:
            nodes.append(NavigableString(text[cursor:span.start]))
        segment = span.segment
        if span.origin is Origin.AUTOMATIC and not has_kanji(segment.text):
            nodes.append(NavigableString(text[span.start:span.end]))
        else:
            nodes.append(make_ruby(soup, segment.base_chunks, segment.reading_chunks))
            changed = True
        cursor = span.end
    if cursor < len(text):
        nodes.append(NavigableString(text[cursor:]))
    return nodes, changed


def render_text(
    text: str,
    engine: FuriganaEngine,
    selections: Iterable[tuple[int, int]] = (),
) -> str:
    """Return ``text`` as HTML, with ruby around every resolved kanji span."""
    soup = BeautifulSoup("", "html.parser")
    container = soup.new_tag("span")
    spans = engine.annotate(text, selections)
    nodes, _ = _span_nodes(soup, text, spans)
    for node in nodes:
        container.append(node)
    return container.decode_contents()


def _collect_text_nodes(node, out: list[NavigableString], seen: set[int]) -> None:
    if isinstance(node, NavigableString):
        if type(node) is not NavigableString:
            return
        if id(node) in seen or not str(node).strip():
            return
        seen.add(id(node))
        out.append(node)
        return
    if not isinstance(node, Tag):
        return
    if node.name in _SKIP_TAGS:
        return
    if node.find_parent("ruby") is not None:
        return
    for child in list(node.children):
        _collect_text_nodes(child, out, seen)


def annotate_html(html: str, engine: FuriganaEngine) -> str:
    """
    Add ruby to the text of an already rendered HTML document.

    Only text inside paragraphs, headings, lists and tables is touched; code,
    preformatted blocks, scripts, styles and existing ruby are left alone.
    With reading mode off the document is returned unchanged.
    """
    if not engine.reading_mode:
        return html
    soup = BeautifulSoup(html, "html.parser")
    text_nodes: list[NavigableString] = []
    seen: set[int] = set()
    for block in soup.find_all(CONTAINER_TAGS):
        if not any(is_japanese_char(ch) for ch in block.get_text()):
            continue
        _collect_text_nodes(block, text_nodes, seen)

    for text_node in text_nodes:
        text = str(text_node)
        spans = engine.annotate(text, code_aware=False)
        if not spans:
            continue
        nodes, changed = _span_nodes(soup, text, spans)
        if changed:
            text_node.replace_with(*nodes)
    return str(soup)


def to_markup(
    text: str,
    spans: Iterable[ResolvedSpan],
    style: NotationStyle | str = NotationStyle.CURLY,
    reading_filter: Callable[[str], str] | None = None,
) -> str:
    """
    Write resolved spans back as inline override notation.

    Manual spans keep their source text; automatic spans become one override
    per kanji chunk. ``none`` falls back to curly brackets.
    """
    opening, closing = _BRACKETS.get(NotationStyle.coerce(style), _BRACKETS[NotationStyle.CURLY])
    pieces: list[str] = []
    cursor = 0
    for span in spans:
        pieces.append(text[cursor:span.start])
        if span.origin is Origin.MANUAL:
            pieces.append(text[span.start:span.end])
        else:
            for base, reading in span.segment.pairs():
                if has_kanji(base) and reading:
                    if reading_filter is not None:
                        reading = reading_filter(reading)
                    pieces.append(f"{opening}{base}|{reading}{closing}")
                else:
                    pieces.append(base)
        cursor = span.end
    pieces.append(text[cursor:])
    return "".join(pieces)
