from __future__ import annotations

from typing import Iterable, Sequence

from .markup import TextUnit

__all__ = ["align_reading", "readings_to_take"]


def readings_to_take(readings_remaining: int, kanji_remaining: int) -> int:
    """
    Number of consecutive readings the current kanji chunk consumes.

    ``kanji_remaining`` counts the current chunk too. Every chunk still ahead
    keeps at least one reading; any surplus goes to the current chunk. Returns
    0 only when no readings are left.
    """
    if readings_remaining < 0:
        raise ValueError(f"readings_remaining must be non-negative, got {readings_remaining}")
    if kanji_remaining < 1:
        raise ValueError(f"kanji_remaining must include the current chunk, got {kanji_remaining}")
    if readings_remaining == 0:
        return 0
    return max(1, readings_remaining - (kanji_remaining - 1))


def _following_kana(units: Sequence[TextUnit], index: int) -> list[str]:
    kana: list[str] = []
    for unit in units[index + 1 :]:
        if not unit.is_kana:
            break
        kana.append(unit.content)
    return kana


def _echoed_okurigana(picked: Sequence[str], following: Sequence[str]) -> int:
    # Only surplus readings may be dropped; the first one always belongs to the chunk.
    limit = min(len(picked) - 1, len(following))
    for count in range(limit, 0, -1):
        if list(picked[-count:]) == list(following[:count]):
            return count
    return 0


def align_reading(readings: Iterable[str], units: Iterable[TextUnit]) -> str | None:
    """
    Rebuild the full reading from furigana entries and text units.

    Kana units are copied through. Each kanji unit takes
    :func:`readings_to_take` readings in order; when none are left the glyphs
    themselves are emitted. Returns None for an empty result.
    """
    reading_list = list(readings)
    unit_list = list(units)
    kanji_left = sum(1 for unit in unit_list if not unit.is_kana)

    position = 0
    pieces: list[str] = []
    for index, unit in enumerate(unit_list):
        if unit.is_kana:
            pieces.append(unit.content)
            continue
        take = readings_to_take(len(reading_list) - position, kanji_left)
        kanji_left -= 1
        if take == 0:
            pieces.append(unit.content)
            continue
        picked = reading_list[position : position + take]
        position += take
        echoed = _echoed_okurigana(picked, _following_kana(unit_list, index))
        pieces.append("".join(picked[: len(picked) - echoed]))

    result = "".join(pieces)
    if not result:
        return None
    return result
