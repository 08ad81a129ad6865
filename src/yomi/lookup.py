from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable

import requests

from .align import align_reading
from .config import LookupConfig
from .encoding import build_lookup_url
from .markup import JISHO_LAYOUT, PageLayout, locate_fragments, tokenize_readings, tokenize_text

__all__ = [
    "FetchError",
    "HttpFetcher",
    "LookupOutcome",
    "ReadingLookup",
    "enclose_in_parentheses",
    "parse_reading",
    "set_debug_logging",
]

_DEBUG_LOG = False
_FALLBACK_ENCODINGS = ("utf-8", "cp932", "shift_jis", "euc_jp")

Fetch = Callable[[str], str]


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def _debug_log(message: str) -> None:
    if _DEBUG_LOG:
        print(f"[yomi debug] {message}", file=sys.stderr)


class FetchError(RuntimeError):
    """Raised when the dictionary page cannot be retrieved."""


def _decode_body(response: requests.Response) -> str:
    content_type = response.headers.get("Content-Type", "")
    if "charset=" in content_type.lower() and response.encoding:
        return response.text
    raw = response.content
    for enc in _FALLBACK_ENCODINGS:
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="replace")


class HttpFetcher:
    """GET a page over HTTP(S), following redirects."""

    def __init__(self, timeout: float = 10.0, user_agent: str | None = None) -> None:
        self.timeout = timeout
        self._session = requests.Session()
        if user_agent:
            self._session.headers["User-Agent"] = user_agent

    def fetch(self, url: str) -> str:
        try:
            resp = self._session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            raise FetchError(str(exc) or exc.__class__.__name__) from exc
        if not 200 <= resp.status_code < 300:
            raise FetchError(f"GET {url} failed with status {resp.status_code}")
        return _decode_body(resp)

    __call__ = fetch

    def close(self) -> None:
        self._session.close()


def parse_reading(page: str, layout: PageLayout = JISHO_LAYOUT) -> str | None:
    """Extract the hiragana reading from a dictionary page, or None."""
    fragments = locate_fragments(page, layout)
    if fragments is None:
        _debug_log("representation block not found")
        return None
    readings = tokenize_readings(fragments.readings_markup)
    if not readings:
        _debug_log("furigana block holds no readings")
        return None
    units = tokenize_text(fragments.text_markup)
    _debug_log(f"readings={readings} units={[(u.kind, u.content) for u in units]}")
    return align_reading(readings, units)


def enclose_in_parentheses(text: str) -> str:
    return f"({text})"


@dataclass(frozen=True, slots=True)
class LookupOutcome:
    word: str
    reading: str | None = None
    error: str | None = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "fetch_error"
        if self.reading is None:
            return "not_found"
        return "ok"

    @property
    def display(self) -> str | None:
        if self.reading is None:
            return None
        return enclose_in_parentheses(self.reading)

    @property
    def message(self) -> str:
        if self.error is not None:
            return f"Error fetching data: {self.error}"
        if self.reading is None:
            return f"No reading found for: {self.word}"
        return self.display or ""


class ReadingLookup:
    """
    Look words up on the configured dictionary site.

    ``fetch`` defaults to an :class:`HttpFetcher`; any callable that maps a URL
    to page text and raises :class:`FetchError` on failure can stand in.
    """

    def __init__(self, config: LookupConfig | None = None, fetch: Fetch | None = None) -> None:
        self.config = config or LookupConfig()
        self._owned_fetcher: HttpFetcher | None = None
        if fetch is None:
            self._owned_fetcher = HttpFetcher(
                timeout=self.config.timeout,
                user_agent=self.config.user_agent,
            )
            fetch = self._owned_fetcher.fetch
        self._fetch = fetch

    def url_for(self, word: str) -> str:
        return build_lookup_url(self.config.url_template, word)

    def lookup(self, word: str) -> LookupOutcome:
        word = word.strip()
        if not word:
            return LookupOutcome(word=word)
        url = self.url_for(word)
        _debug_log(f"fetching {url}")
        try:
            page = self._fetch(url)
        except FetchError as exc:
            _debug_log(f"fetch failed for {word}: {exc}")
            return LookupOutcome(word=word, error=str(exc))
        reading = parse_reading(page, self.config.layout)
        _debug_log(f"{word} -> {reading}")
        return LookupOutcome(word=word, reading=reading)

    def close(self) -> None:
        if self._owned_fetcher is not None:
            self._owned_fetcher.close()

    def __enter__(self) -> "ReadingLookup":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
