from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path

import tomllib
import uvicorn
from rich.console import Console

from .config import ConfigError, LookupConfig, load_config
from .insert import AnnotateResult, annotate_span, annotate_word_at
from .logging_utils import build_uvicorn_log_config
from .lookup import ReadingLookup, set_debug_logging
from .web import WebConfig, create_app


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("yomi")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"yomi {__version__}",
    )


def _add_lookup_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        help="Path to a TOML config file (default: $YOMI_CONFIG or ~/.config/yomi/config.toml).",
    )
    parser.add_argument(
        "--url-template",
        help="Dictionary URL with a single {} placeholder for the word (default: Jisho).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for the dictionary page.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print each lookup stage (URL, readings, text units) to stderr.",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Look up hiragana readings on Jisho. Use `yomi annotate` to insert them into text.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "words",
        nargs="+",
        help="Japanese words to look up.",
    )
    ap.add_argument(
        "--plain",
        action="store_true",
        help="Print only the reading instead of WORD(reading).",
    )
    _add_lookup_options(ap)
    return ap


def build_annotate_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Insert the parenthesised reading after a selection or the word at a position.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "input_path",
        nargs="?",
        help="Text file to annotate (default: read stdin).",
    )
    target = ap.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--at",
        type=int,
        metavar="INDEX",
        help="Character offset inside the word to look up.",
    )
    target.add_argument(
        "--span",
        metavar="START:END",
        help="Character offsets of the selection to look up (END exclusive).",
    )
    ap.add_argument(
        "--in-place",
        action="store_true",
        help="Rewrite the input file instead of printing the result.",
    )
    _add_lookup_options(ap)
    return ap


def build_serve_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Serve lookups over HTTP (GET /api/lookup, POST /api/annotate).",
    )
    _add_version_flag(ap)
    ap.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1).")
    ap.add_argument("--port", type=int, default=8765, help="Port (default: 8765).")
    _add_lookup_options(ap)
    return ap


def _config_from_args(args: argparse.Namespace) -> LookupConfig:
    set_debug_logging(bool(getattr(args, "debug", False)))
    try:
        return load_config(
            getattr(args, "config", None),
            url_template=getattr(args, "url_template", None),
            timeout=getattr(args, "timeout", None),
        )
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc


def _parse_span(value: str) -> tuple[int, int]:
    start_text, sep, end_text = value.partition(":")
    if not sep:
        raise SystemExit(f"--span must look like START:END, got {value!r}")
    try:
        return int(start_text), int(end_text)
    except ValueError as exc:
        raise SystemExit(f"--span must look like START:END, got {value!r}") from exc


def _run_lookup(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    errors = Console(stderr=True, highlight=False)
    failures = 0
    with ReadingLookup(config) as reading_lookup:
        for word in args.words:
            outcome = reading_lookup.lookup(word)
            if outcome.reading is None:
                failures += 1
                errors.print(outcome.message, style="red", markup=False, soft_wrap=True)
                continue
            if args.plain:
                print(outcome.reading)
            else:
                print(f"{outcome.word}{outcome.display}")
    return 1 if failures else 0


def _run_annotate(args: argparse.Namespace) -> int:
    if args.in_place and not args.input_path:
        raise SystemExit("--in-place requires an input file.")
    config = _config_from_args(args)

    if args.input_path:
        path = Path(args.input_path)
        if not path.is_file():
            raise SystemExit(f"Input file not found: {path}")
        text = path.read_text(encoding="utf-8")
    else:
        path = None
        text = sys.stdin.read()

    with ReadingLookup(config) as reading_lookup:
        try:
            if args.span is not None:
                start, end = _parse_span(args.span)
                result: AnnotateResult = annotate_span(text, start, end, reading_lookup.lookup)
            else:
                result = annotate_word_at(text, args.at, reading_lookup.lookup)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc

    if not result.changed:
        message = result.outcome.message if result.outcome else f"No word at offset {args.at}."
        Console(stderr=True, highlight=False).print(message, style="red", markup=False, soft_wrap=True)

    if args.in_place and path is not None:
        if result.changed:
            path.write_text(result.text, encoding="utf-8")
    else:
        sys.stdout.write(result.text)
    return 0 if result.changed else 1


def _run_serve(args: argparse.Namespace) -> int:
    config = WebConfig(lookup=_config_from_args(args), host=args.host, port=args.port)
    app = create_app(config)
    print(f"Serving yomi lookups from {config.lookup.url_template}")
    print(f"Web URL: http://{config.host}:{config.port}/api/lookup?word=")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_config=build_uvicorn_log_config(debug=bool(args.debug)),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "annotate":
        annotate_args = build_annotate_parser().parse_args(argv[1:])
        return _run_annotate(annotate_args)
    if argv and argv[0] == "serve":
        serve_args = build_serve_parser().parse_args(argv[1:])
        return _run_serve(serve_args)

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0
    args = parser.parse_args(argv)
    return _run_lookup(args)


if __name__ == "__main__":
    raise SystemExit(main())
