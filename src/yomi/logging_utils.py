from __future__ import annotations

from copy import copy, deepcopy
from typing import Any
from urllib.parse import unquote

from uvicorn.config import LOGGING_CONFIG
from uvicorn.logging import AccessFormatter as UvicornAccessFormatter

__all__ = ["LookupAccessFormatter", "build_uvicorn_log_config", "decode_request_path"]


def decode_request_path(value: str) -> str:
    """Turn ``/api/lookup?word=%E9%A3%9F`` back into ``/api/lookup?word=食``."""
    try:
        return unquote(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return value


class LookupAccessFormatter(UvicornAccessFormatter):
    """Access log formatter that shows looked-up words instead of %XX escapes."""

    def formatMessage(self, record):  # type: ignore[override]
        args = record.args
        if not isinstance(args, tuple) or len(args) != 5:
            return super().formatMessage(record)
        client_addr, method, full_path, http_version, status_code = args
        if not isinstance(full_path, str):
            return super().formatMessage(record)
        new_record = copy(record)
        new_record.args = (
            client_addr,
            method,
            decode_request_path(full_path),
            http_version,
            status_code,
        )
        return super().formatMessage(new_record)


def build_uvicorn_log_config(*, debug: bool = False) -> dict[str, Any]:
    config = deepcopy(LOGGING_CONFIG)
    formatter = config.get("formatters", {}).get("access")
    if isinstance(formatter, dict):
        formatter["()"] = "yomi.logging_utils.LookupAccessFormatter"
    if debug:
        for logger in config.get("loggers", {}).values():
            if isinstance(logger, dict):
                logger["level"] = "DEBUG"
    return config
