"""Tests for the FastAPI playback API.

WHY: The browser page relies on the upload validation rules and on the
changed/visible flags of the display responses.

HOW: The player dependency is overridden with a player wired to the fake
analyzer, converter, and resolver, so no dictionary service is needed.
The TestClient is used without entering the app lifespan.
"""

from __future__ import annotations

import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from furigana_player import __version__
from furigana_player.player import SubtitlePlayer
from furigana_player.server.app import app, get_player


@pytest.fixture
def player(annotator):
    return SubtitlePlayer(annotator)


@pytest.fixture
def client(player):
    app.dependency_overrides[get_player] = lambda: player
    yield TestClient(app)
    app.dependency_overrides.clear()


def _srt_upload(content: bytes, name: str = "episode.srt"):
    return [("file", (name, io.BytesIO(content), "application/x-subrip"))]


@pytest.fixture
def loaded(client, sample_srt):
    resp = client.post("/subtitles", files=_srt_upload(sample_srt.encode("utf-8")))
    assert resp.status_code == 200
    return client


# ---------------------------------------------------------------------------
# POST /subtitles
# ---------------------------------------------------------------------------


class TestLoadSubtitles:

    def test_upload_returns_count(self, client, sample_srt):
        resp = client.post("/subtitles", files=_srt_upload(sample_srt.encode("utf-8")))
        assert resp.status_code == 200
        assert resp.json() == {"filename": "episode.srt", "count": 4}

    def test_reject_unsupported_file_type(self, client):
        resp = client.post("/subtitles", files=_srt_upload(b"WEBVTT", name="episode.vtt"))
        assert resp.status_code == 400
        assert "Unsupported file type" in resp.json()["detail"]

    def test_reject_non_utf8(self, client):
        resp = client.post("/subtitles", files=_srt_upload("東京".encode("shift_jis")))
        assert resp.status_code == 422
        assert "UTF-8" in resp.json()["detail"]

    def test_upload_hides_display(self, loaded, sample_srt):
        loaded.post("/playback/time", json={"seconds": 1.5})
        loaded.post("/subtitles", files=_srt_upload(sample_srt.encode("utf-8")))
        assert loaded.get("/display").json()["visible"] is False


# ---------------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------------


class TestPlayback:

    def test_time_update_shows_subtitle(self, loaded):
        resp = loaded.post("/playback/time", json={"seconds": 1.5})
        assert resp.status_code == 200
        body = resp.json()
        assert body["visible"] is True
        assert body["changed"] is True
        assert body["glossed"] is True
        assert body["text"] == "東京に行く"
        assert body["start_ms"] == 1000
        assert body["end_ms"] == 2500
        assert 'class="kanji-word"' in body["html"]

    def test_same_subtitle_not_changed(self, loaded):
        first = loaded.post("/playback/time", json={"seconds": 1.5}).json()
        second = loaded.post("/playback/time", json={"seconds": 2.0}).json()
        assert second["changed"] is False
        assert second["visible"] is True
        assert second["pass_id"] == first["pass_id"]

    def test_gap_hides(self, loaded):
        loaded.post("/playback/time", json={"seconds": 1.5})
        body = loaded.post("/playback/time", json={"seconds": 2.8}).json()
        assert body["visible"] is False
        assert body["changed"] is True
        assert body["html"] is None

    def test_negative_time_rejected(self, loaded):
        resp = loaded.post("/playback/time", json={"seconds": -1})
        assert resp.status_code == 422

    def test_get_display(self, loaded):
        loaded.post("/playback/time", json={"seconds": 3.5})
        body = loaded.get("/display").json()
        assert body["text"] == "日本語を 勉強する"
        assert body["changed"] is False


# ---------------------------------------------------------------------------
# Formats and health
# ---------------------------------------------------------------------------


class TestFormatsAndHealth:

    def test_list_formats(self, client):
        body = client.get("/formats").json()
        assert [f["key"] for f in body] == ["html", "plain_text"]
        assert body[0]["suffix"] == "-annotated.html"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "version": __version__}

    def test_lifespan_warms_up_annotator(self):
        player = MagicMock()
        with patch("furigana_player.server.app.build_player", return_value=player), \
                patch("furigana_player.server.app.DictionaryClient") as client_cls:
            client_cls.return_value.__aenter__ = AsyncMock(return_value=MagicMock())
            client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
            with TestClient(app):
                pass
        player.annotator.warm_up.assert_called_once_with()
