from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "Cursor",
    "Fragments",
    "JISHO_LAYOUT",
    "PageLayout",
    "TextUnit",
    "locate_fragments",
    "tokenize_readings",
    "tokenize_text",
]

SPAN_OPEN = "<span"
SPAN_CLOSE = "</span>"
_ASCII_WS = " \t\n\r\f\v"
_ASCII_WS_RUN = re.compile(r"[ \t\n\r\f\v]+")

KANA = "kana"
KANJI = "kanji"


@dataclass(frozen=True, slots=True)
class PageLayout:
    """Class markers identifying the reading block of a dictionary page."""

    container_tag: str = "div"
    container_class: str = "concept_light-representation"
    reading_class: str = "furigana"
    text_class: str = "text"

    @property
    def container_open(self) -> str:
        return f'<{self.container_tag} class="{self.container_class}"'

    @property
    def container_close(self) -> str:
        return f"</{self.container_tag}>"

    @property
    def reading_open(self) -> str:
        return f'<span class="{self.reading_class}">'

    @property
    def text_open(self) -> str:
        return f'<span class="{self.text_class}">'


JISHO_LAYOUT = PageLayout()


@dataclass(frozen=True, slots=True)
class Fragments:
    readings_markup: str
    text_markup: str


@dataclass(frozen=True, slots=True)
class TextUnit:
    """
    One piece of the annotated word.

    ``kana`` units are copied into the reading as-is; ``kanji`` units are a
    run of glyphs that needs readings from the furigana block.
    """

    kind: str
    content: str

    @classmethod
    def kana(cls, content: str) -> "TextUnit":
        return cls(KANA, content)

    @classmethod
    def kanji(cls, content: str) -> "TextUnit":
        return cls(KANJI, content)

    @property
    def is_kana(self) -> bool:
        return self.kind == KANA


class Cursor:
    """Position inside a markup string with literal (non-pattern) search."""

    __slots__ = ("text", "pos")

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def remaining(self) -> str:
        return self.text[self.pos :]

    def startswith(self, marker: str) -> bool:
        return self.text.startswith(marker, self.pos)

    def find(self, marker: str) -> int | None:
        index = self.text.find(marker, self.pos)
        if index < 0:
            return None
        return index

    def jump(self, index: int) -> None:
        self.pos = max(0, min(index, len(self.text)))

    def advance(self, count: int) -> None:
        self.jump(self.pos + count)

    def take_until(self, index: int) -> str:
        chunk = self.text[self.pos : index]
        self.jump(index)
        return chunk

    def take_rest(self) -> str:
        return self.take_until(len(self.text))


def _collapse_whitespace(text: str) -> str:
    return _ASCII_WS_RUN.sub(" ", text)


def _find_container(page: str, layout: PageLayout) -> str | None:
    cursor = Cursor(page)
    start = cursor.find(layout.container_open)
    if start is None:
        return None
    cursor.jump(start + len(layout.container_open))
    tag_end = cursor.find(">")
    if tag_end is None:
        return None
    cursor.jump(tag_end + 1)
    # The container never nests with itself, so the first close ends it.
    close = cursor.find(layout.container_close)
    if close is None:
        return None
    return cursor.take_until(close)


def _find_reading_markup(block: str, layout: PageLayout) -> str | None:
    cursor = Cursor(block)
    start = cursor.find(layout.reading_open)
    if start is None:
        return None
    cursor.jump(start + len(layout.reading_open))

    adjacent: list[int] = []
    for separator in (" ", ""):
        end = cursor.find(SPAN_CLOSE + separator + layout.text_open)
        if end is not None:
            adjacent.append(end)
    if adjacent:
        return cursor.take_until(min(adjacent))

    end = cursor.find(SPAN_CLOSE)
    if end is None:
        return None
    return cursor.take_until(end)


def _find_text_markup(block: str, layout: PageLayout) -> str | None:
    cursor = Cursor(block)
    start = cursor.find(layout.text_open)
    if start is None:
        return None
    cursor.jump(start + len(layout.text_open))
    region_start = cursor.pos

    depth = 0
    while not cursor.at_end:
        close = cursor.find(SPAN_CLOSE)
        if close is None:
            return None
        opening = cursor.find(SPAN_OPEN)
        if opening is not None and opening < close:
            depth += 1
            cursor.jump(opening + len(SPAN_OPEN))
            continue
        if depth == 0:
            return block[region_start:close]
        depth -= 1
        cursor.jump(close + len(SPAN_CLOSE))
    return None


def locate_fragments(page: str, layout: PageLayout = JISHO_LAYOUT) -> Fragments | None:
    """
    Isolate the furigana and text regions of the first representation block.

    Returns None when the page does not carry the expected structure.
    """
    block = _find_container(page, layout)
    if block is None:
        return None
    block = _collapse_whitespace(block)

    readings_markup = _find_reading_markup(block, layout)
    if readings_markup is None:
        return None
    text_markup = _find_text_markup(block, layout)
    if text_markup is None:
        return None
    return Fragments(
        readings_markup=readings_markup.strip(_ASCII_WS),
        text_markup=text_markup.strip(_ASCII_WS),
    )


def _open_tag_end(cursor: Cursor) -> int | None:
    """Index just past the ``>`` of the span tag starting at the cursor."""
    saved = cursor.pos
    cursor.advance(len(SPAN_OPEN))
    tag_end = cursor.find(">")
    cursor.jump(saved)
    if tag_end is None:
        return None
    return tag_end + 1


def _read_span(cursor: Cursor) -> str | None:
    """
    Consume the span starting at the cursor and return its inner text.

    Leaves the cursor untouched when the span has no closing tag.
    """
    content_start = _open_tag_end(cursor)
    if content_start is None:
        return None
    close = cursor.text.find(SPAN_CLOSE, content_start)
    if close < 0:
        return None
    cursor.jump(close + len(SPAN_CLOSE))
    return cursor.text[content_start:close]


def tokenize_readings(markup: str) -> list[str]:
    readings: list[str] = []
    cursor = Cursor(markup)
    while True:
        start = cursor.find(SPAN_OPEN)
        if start is None:
            break
        cursor.jump(start)
        content = _read_span(cursor)
        if content is None:
            break
        # Empty annotations sit over kana that the text region already spells out.
        content = content.strip(_ASCII_WS)
        if content:
            readings.append(content)
    return readings


def _append_kanji(units: list[TextUnit], chunk: str) -> None:
    chunk = chunk.strip(_ASCII_WS)
    if chunk:
        units.append(TextUnit.kanji(chunk))


def tokenize_text(markup: str) -> list[TextUnit]:
    """
    Split the text region into kana spans and the raw glyph runs between them.

    A run of raw glyphs stays one kanji unit; it is never split per character.
    """
    units: list[TextUnit] = []
    cursor = Cursor(markup)
    while not cursor.at_end:
        if cursor.startswith(SPAN_OPEN):
            content = _read_span(cursor)
            if content is not None:
                units.append(TextUnit.kana(content))
                continue
            content_start = _open_tag_end(cursor)
            if content_start is not None:
                cursor.jump(content_start)
                remainder = cursor.take_rest()
                if remainder:
                    units.append(TextUnit.kana(remainder))
            break
        next_open = cursor.find(SPAN_OPEN)
        end = next_open if next_open is not None else len(markup)
        _append_kanji(units, cursor.take_until(end))
    return units
