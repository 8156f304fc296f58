"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and the generated OpenAPI documentation.

HOW: One model per request or response body. All fields carry a
Field(description=...) so the /docs page explains them.

RULES:
- Response models expose rendered output, never IR objects
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class PlaybackTimeRequest(BaseModel):
    """Current playback position reported by the video element."""

    seconds: float = Field(ge=0, description="Playback position in seconds.")

    model_config = {"json_schema_extra": {"examples": [{"seconds": 12.48}]}}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SubtitlesLoadedResponse(BaseModel):
    """Result of loading a subtitle file."""

    filename: str = Field(description="Uploaded filename.")
    count: int = Field(description="Number of subtitle entries parsed from the file.")


class DisplayResponse(BaseModel):
    """Current state of the subtitle overlay.

    RULES:
    - text/html/start_ms/end_ms are only set while a subtitle is visible
    - changed is True when the request that produced this response
      updated the display
    - glossed is False for the readings-only display shown while the
      dictionary lookups of the same pass are in flight
    """

    visible: bool = Field(description="Whether a subtitle is shown.")
    text: Optional[str] = Field(default=None, description="Raw subtitle text.")
    html: Optional[str] = Field(
        default=None,
        description="Annotated subtitle as an HTML fragment (ruby readings and gloss popups).",
    )
    start_ms: Optional[int] = Field(default=None, description="Subtitle start time in milliseconds.")
    end_ms: Optional[int] = Field(default=None, description="Subtitle end time in milliseconds.")
    pass_id: int = Field(description="Id of the annotation pass behind this display.")
    glossed: bool = Field(
        default=False,
        description="False while only the furigana readings are shown and glosses are still being looked up.",
    )
    changed: bool = Field(default=False, description="Whether this request changed the display.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "visible": True,
                "text": "東京に行く",
                "html": (
                    '<span class="kanji-word"><span class="kanji-popup" data-reading="とうきょう" '
                    'data-meaning="Tokyo">とうきょう - Tokyo</span>'
                    "<ruby>東京<rp>(</rp><rt>とうきょう</rt><rp>)</rp></ruby></span>に行く"
                ),
                "start_ms": 1000,
                "end_ms": 2500,
                "pass_id": 3,
                "glossed": True,
                "changed": True,
            }
        ]
    }}


class FormatInfo(BaseModel):
    """Description of an available output format."""

    key: str = Field(description="Format identifier used by the CLI --format flag.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-annotated.html').")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
