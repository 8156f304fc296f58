"""FastAPI application driving the subtitle player over HTTP.

WHY: The video page runs in a browser, while the annotation pipeline
(morphological analysis, furigana, dictionary lookups) runs in Python.
The page uploads a subtitle file once, then reports its playback time;
the API answers with the annotated subtitle to show.

HOW: One SubtitlePlayer is created in the app lifespan, together with an
open DictionaryClient, and handed to endpoints through the get_player
dependency. Time updates are forwarded to SubtitlePlayer.on_time_update()
and the resulting display is rendered with the HTML formatter.

RULES:
- All endpoints have OpenAPI descriptions and response models
- Error responses use a consistent ErrorResponse schema
- Upload validation checks the extension against SUBTITLE_FORMATS (400)
  and requires UTF-8 content (422)
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile

from furigana_player import __version__
from furigana_player.api import DictionaryClient
from furigana_player.config import SUBTITLE_FORMATS
from furigana_player.core.ir import fragment
from furigana_player.core.markup import render_markup
from furigana_player.formatters import FORMATTERS
from furigana_player.player import Display, SubtitlePlayer, build_player
from furigana_player.server.models import (
    DisplayResponse,
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    PlaybackTimeRequest,
    SubtitlesLoadedResponse,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and player setup
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the dictionary client and create the player; close on shutdown.

    The analyzer and converter load their dictionaries here, so the first
    time update does not block the event loop doing it.
    """
    async with DictionaryClient() as client:
        app.state.player = build_player(client)
        app.state.player.annotator.warm_up()
        yield


app = FastAPI(
    lifespan=lifespan,
    title="Furigana Player API",
    description=(
        "Annotates timed Japanese subtitles with furigana readings and "
        "dictionary gloss popups. Upload an SRT file, report the playback "
        "time, and render the returned HTML fragment."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


def get_player(request: Request) -> SubtitlePlayer:
    """The player created in the app lifespan."""
    return request.app.state.player


PlayerDep = Annotated[SubtitlePlayer, Depends(get_player)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _display_to_response(display: Display, changed: bool) -> DisplayResponse:
    """Convert the player's Display to a DisplayResponse Pydantic model."""
    if not display.visible or display.entry is None:
        return DisplayResponse(visible=False, pass_id=display.pass_id, changed=changed)
    return DisplayResponse(
        visible=True,
        text=display.entry.text,
        html=render_markup(display.tree) if display.tree is not None else None,
        start_ms=display.entry.start,
        end_ms=display.entry.end,
        pass_id=display.pass_id,
        glossed=display.glossed,
        changed=changed,
    )


def _validate_file_extension(filename: str) -> None:
    """Raise HTTPException if the file extension is not supported."""
    ext = Path(filename).suffix.lower()
    if ext not in SUBTITLE_FORMATS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUBTITLE_FORMATS))
            ),
        )


# ---------------------------------------------------------------------------
# Endpoints: Subtitles and playback
# ---------------------------------------------------------------------------


@app.post(
    "/subtitles",
    response_model=SubtitlesLoadedResponse,
    tags=["subtitles"],
    summary="Load a subtitle file",
    description=(
        "Upload an SRT file. It replaces any previously loaded subtitles "
        "and hides the current display."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported file type"},
        422: {"model": ErrorResponse, "description": "File is not valid UTF-8"},
    },
)
async def load_subtitles(
    player: PlayerDep,
    file: Annotated[UploadFile, File(description="SRT subtitle file (UTF-8)")],
) -> SubtitlesLoadedResponse:
    filename = Path(file.filename or "upload").name
    _validate_file_extension(filename)

    content = await file.read()
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=422,
            detail="Subtitle file must be UTF-8 encoded: {}".format(exc),
        )

    count = player.load_subtitles(text)
    logger.info("Loaded %d subtitle entries from %s", count, filename)
    return SubtitlesLoadedResponse(filename=filename, count=count)


@app.post(
    "/playback/time",
    response_model=DisplayResponse,
    tags=["playback"],
    summary="Report the playback position",
    description=(
        "Report the current playback time. If the active subtitle changed, "
        "it is annotated and returned with changed=true; otherwise the "
        "current display is returned with changed=false."
    ),
)
async def playback_time(player: PlayerDep, body: PlaybackTimeRequest) -> DisplayResponse:
    result = await player.on_time_update(body.seconds)
    return _display_to_response(player.display, changed=result is not None)


@app.get(
    "/display",
    response_model=DisplayResponse,
    tags=["playback"],
    summary="Get the current display",
    description="Returns what the subtitle overlay currently shows.",
)
async def get_display(player: PlayerDep) -> DisplayResponse:
    return _display_to_response(player.display, changed=False)


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available output formats",
    description="Returns the registered formatters with their identifiers, names, and suffixes.",
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        outputs = formatter.format(fragment())
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=outputs[0].suffix if outputs else "",
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Entry point for the furigana-player-api console script."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)
