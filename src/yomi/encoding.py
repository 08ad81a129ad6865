from __future__ import annotations

from urllib.parse import quote

__all__ = ["URL_PLACEHOLDER", "encode_query", "build_lookup_url"]

URL_PLACEHOLDER = "{}"


def encode_query(text: str) -> str:
    """
    Percent-encode ``text`` for use inside a URL path or query.

    Every UTF-8 byte that is not an ASCII letter, digit or one of ``-._~``
    becomes ``%XX`` with uppercase hex digits.
    """
    return quote(text, safe="", encoding="utf-8", errors="surrogatepass")


def build_lookup_url(template: str, word: str) -> str:
    # str.replace keeps the %XX escapes literal.
    return template.replace(URL_PLACEHOLDER, encode_query(word))
