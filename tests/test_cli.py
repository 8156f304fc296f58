"""Tests for the command-line interface."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from furigana_player.cli import build_parser, main
from furigana_player.player import SubtitlePlayer


@pytest.fixture
def srt_file(tmp_path, sample_srt):
    path = tmp_path / "episode.srt"
    path.write_text(sample_srt, encoding="utf-8")
    return path


@pytest.fixture
def fake_build_player(annotator):
    with patch("furigana_player.cli.build_player", MagicMock(return_value=SubtitlePlayer(annotator))) as mock:
        yield mock


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["episode.srt"])
        assert args.at is None
        assert args.format == "plain_text"
        assert not args.no_readings

    def test_at_and_all_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["episode.srt", "--at", "1", "--all"])

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["episode.srt", "--format", "docx"])


class TestMain:

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.srt")])
        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_unsupported_extension(self, tmp_path, capsys):
        path = tmp_path / "episode.vtt"
        path.write_text("WEBVTT", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1
        assert "Unsupported file type" in capsys.readouterr().err

    def test_non_utf8_file(self, tmp_path, capsys):
        path = tmp_path / "episode.srt"
        path.write_bytes("東京".encode("shift_jis"))
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1

    def test_requires_file_without_serve(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_at_prints_active_subtitle(self, srt_file, fake_build_player, capsys):
        main([str(srt_file), "--at", "1.5"])
        out = capsys.readouterr().out
        assert out.splitlines() == [
            "東京に行く",
            "東京 (とうきょう): Tokyo",
            "行 (い): No definition found",
        ]

    def test_at_with_no_subtitle(self, srt_file, fake_build_player, capsys):
        main([str(srt_file), "--at", "2.8"])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No subtitle at 2.8s" in captured.err

    def test_all_prints_time_ranges(self, srt_file, fake_build_player, capsys):
        main([str(srt_file), "--all", "--format", "html"])
        out = capsys.readouterr().out
        assert "00:00:01,000 --> 00:00:02,500" in out
        assert "00:00:03,000 --> 00:00:05,000" in out
        assert "<ruby>日本語" in out
        assert "00:00:06,000 --> 00:00:07,000" not in out
        assert "00:00:08,000 --> 00:00:09,500" in out

    def test_flags_passed_to_player_factory(self, srt_file, fake_build_player):
        main([str(srt_file), "--at", "1.5", "--no-readings", "--no-analyzer"])
        _, kwargs = fake_build_player.call_args
        assert kwargs == {"readings": False, "analyzer": False}

    def test_serve_starts_api(self):
        with patch("furigana_player.server.app.run_api") as run_api:
            main(["--serve", "--port", "9001"])
        run_api.assert_called_once_with(host="127.0.0.1", port=9001)
