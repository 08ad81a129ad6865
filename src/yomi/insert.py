from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .lookup import LookupOutcome

__all__ = [
    "AnnotateResult",
    "annotate_span",
    "annotate_word_at",
    "char_class",
    "insert_after",
    "word_at",
]

LookupFn = Callable[[str], LookupOutcome]


def _is_kanji(code: int, ch: str) -> bool:
    return (
        0x4E00 <= code <= 0x9FFF  # CJK Unified Ideographs
        or 0x3400 <= code <= 0x4DBF  # Extension A
        or 0x20000 <= code <= 0x2FA1F  # Extensions B-F, Compatibility Supplement
        or 0x30000 <= code <= 0x3134F  # Extension G
        or 0xF900 <= code <= 0xFAFF  # Compatibility Ideographs
        or ch in "々〆ヵヶ"
    )


def char_class(ch: str) -> str | None:
    """Word class used to find the word under a position, or None for separators."""
    if not ch:
        return None
    code = ord(ch)
    if _is_kanji(code, ch):
        return "kanji"
    if 0x3041 <= code <= 0x309F:
        return "hiragana"
    if 0x30A0 <= code <= 0x30FF or 0x31F0 <= code <= 0x31FF or 0xFF66 <= code <= 0xFF9F:
        return "katakana"
    if ch.isascii() and (ch.isalnum() or ch == "_"):
        return "word"
    return None


def word_at(text: str, index: int) -> tuple[int, int] | None:
    """
    Bounds of the same-class character run under ``index``.

    A position right after a word (end of text, or a separator) still picks
    that word.
    """
    if not text or index < 0 or index > len(text):
        return None
    if index == len(text) or char_class(text[index]) is None:
        if index == 0 or char_class(text[index - 1]) is None:
            return None
        index -= 1
    kind = char_class(text[index])
    start = index
    while start > 0 and char_class(text[start - 1]) == kind:
        start -= 1
    end = index + 1
    while end < len(text) and char_class(text[end]) == kind:
        end += 1
    return start, end


def insert_after(text: str, end: int, insertion: str) -> str:
    if not 0 <= end <= len(text):
        raise ValueError(f"Insertion point {end} is outside the text (length {len(text)}).")
    return text[:end] + insertion + text[end:]


@dataclass(frozen=True, slots=True)
class AnnotateResult:
    text: str
    outcome: LookupOutcome | None
    inserted_at: int | None = None

    @property
    def changed(self) -> bool:
        return self.inserted_at is not None


def annotate_span(text: str, start: int, end: int, lookup: LookupFn) -> AnnotateResult:
    """Look up ``text[start:end]`` and place its parenthesised reading after it."""
    if not 0 <= start < end <= len(text):
        raise ValueError(f"Invalid selection {start}:{end} for text of length {len(text)}.")
    outcome = lookup(text[start:end])
    if outcome.display is None:
        return AnnotateResult(text=text, outcome=outcome)
    return AnnotateResult(
        text=insert_after(text, end, outcome.display),
        outcome=outcome,
        inserted_at=end,
    )


def annotate_word_at(text: str, index: int, lookup: LookupFn) -> AnnotateResult:
    bounds = word_at(text, index)
    if bounds is None:
        return AnnotateResult(text=text, outcome=None)
    return annotate_span(text, bounds[0], bounds[1], lookup)
