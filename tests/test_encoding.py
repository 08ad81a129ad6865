from __future__ import annotations

import string
from urllib.parse import unquote_to_bytes

from yomi.encoding import build_lookup_url, encode_query


def test_unreserved_ascii_passes_through() -> None:
    unreserved = string.ascii_letters + string.digits + "-._~"
    assert encode_query(unreserved) == unreserved


def test_japanese_word_is_percent_encoded_with_uppercase_hex() -> None:
    assert encode_query("食べる") == "%E9%A3%9F%E3%81%B9%E3%82%8B"


def test_reserved_characters_are_escaped() -> None:
    encoded = encode_query("a b/c?d%e&f")
    assert encoded == "a%20b%2Fc%3Fd%25e%26f"
    for raw in (" ", "/", "?"):
        assert raw not in encoded


def test_decoding_restores_original_bytes() -> None:
    samples = ["日本", "カタカナ ひらがな", "%41", "mixed/日本語?x=1", ""]
    for sample in samples:
        assert unquote_to_bytes(encode_query(sample)) == sample.encode("utf-8")


def test_build_lookup_url_keeps_escapes_literal() -> None:
    url = build_lookup_url("https://jisho.org/word/{}", "日本")
    assert url == "https://jisho.org/word/%E6%97%A5%E6%9C%AC"


def test_build_lookup_url_with_query_template() -> None:
    url = build_lookup_url("https://example.test/search?q={}&lang=ja", "食")
    assert url == "https://example.test/search?q=%E9%A3%9F&lang=ja"
