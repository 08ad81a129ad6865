from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from .config import LookupConfig
from .insert import annotate_span, annotate_word_at
from .lookup import LookupOutcome, ReadingLookup

__all__ = ["WebConfig", "create_app"]


@dataclass(slots=True)
class WebConfig:
    lookup: LookupConfig = field(default_factory=LookupConfig)
    host: str = "127.0.0.1"
    port: int = 8765


def _outcome_payload(outcome: LookupOutcome) -> dict[str, object]:
    return {
        "word": outcome.word,
        "reading": outcome.reading,
        "display": outcome.display,
        "status": outcome.status,
    }


def _optional_int(payload: dict[str, object], key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise HTTPException(status_code=400, detail=f"{key} must be an integer.")
    return value


def create_app(config: WebConfig, reading_lookup: ReadingLookup | None = None) -> FastAPI:
    if reading_lookup is None:
        reading_lookup = ReadingLookup(config.lookup)

    app = FastAPI(title="yomi")
    app.state.config = config
    app.state.reading_lookup = reading_lookup

    @app.get("/api/lookup")
    def api_lookup(word: str = Query("")) -> JSONResponse:
        word = word.strip()
        if not word:
            raise HTTPException(status_code=400, detail="word is required.")
        outcome = reading_lookup.lookup(word)
        if outcome.status == "fetch_error":
            raise HTTPException(status_code=502, detail=outcome.message)
        if outcome.status == "not_found":
            raise HTTPException(status_code=404, detail=outcome.message)
        return JSONResponse(_outcome_payload(outcome))

    @app.post("/api/annotate")
    def api_annotate(payload: dict[str, object] = Body(...)) -> JSONResponse:
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload.")
        text = payload.get("text")
        if not isinstance(text, str) or not text:
            raise HTTPException(status_code=400, detail="text is required.")
        index = _optional_int(payload, "index")
        start = _optional_int(payload, "start")
        end = _optional_int(payload, "end")
        try:
            if start is not None and end is not None:
                result = annotate_span(text, start, end, reading_lookup.lookup)
            elif index is not None:
                result = annotate_word_at(text, index, reading_lookup.lookup)
            else:
                raise HTTPException(status_code=400, detail="Provide start/end or index.")
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        outcome = result.outcome
        if outcome is not None and outcome.status == "fetch_error":
            raise HTTPException(status_code=502, detail=outcome.message)
        return JSONResponse(
            {
                "text": result.text,
                "inserted": outcome.display if result.changed and outcome else None,
                "status": outcome.status if outcome else "no_word",
                "message": outcome.message if outcome else "No word at the given position.",
            }
        )

    return app
