from .align import align_reading, readings_to_take
from .config import ConfigError, LookupConfig, load_config
from .encoding import build_lookup_url, encode_query
from .insert import AnnotateResult, annotate_span, annotate_word_at, word_at
from .lookup import (
    FetchError,
    HttpFetcher,
    LookupOutcome,
    ReadingLookup,
    enclose_in_parentheses,
    parse_reading,
)
from .markup import JISHO_LAYOUT, PageLayout, TextUnit, locate_fragments, tokenize_readings, tokenize_text

__all__ = [
    "align_reading",
    "readings_to_take",
    "ConfigError",
    "LookupConfig",
    "load_config",
    "build_lookup_url",
    "encode_query",
    "AnnotateResult",
    "annotate_span",
    "annotate_word_at",
    "word_at",
    "FetchError",
    "HttpFetcher",
    "LookupOutcome",
    "ReadingLookup",
    "enclose_in_parentheses",
    "parse_reading",
    "JISHO_LAYOUT",
    "PageLayout",
    "TextUnit",
    "locate_fragments",
    "tokenize_readings",
    "tokenize_text",
]
