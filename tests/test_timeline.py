"""Tests for SRT parsing and active-subtitle lookup."""

from __future__ import annotations

import pytest

from furigana_player.core.ir import SubtitleEntry
from furigana_player.core.timeline import (
    Timeline,
    load_srt_file,
    ms_to_time,
    parse_srt,
    time_to_ms,
)


class TestTimeToMs:

    def test_basic_timestamp(self):
        assert time_to_ms("00:00:01,000") == 1000
        assert time_to_ms("00:00:02,500") == 2500

    def test_hours_minutes(self):
        assert time_to_ms("01:02:03,004") == 3723004

    def test_out_of_range_components_are_not_checked(self):
        assert time_to_ms("00:61:00,000") == 61 * 60 * 1000

    def test_ms_to_time_inverse(self):
        assert ms_to_time(3723004) == "01:02:03,004"
        assert ms_to_time(0) == "00:00:00,000"


class TestParseSrt:

    def test_sample_file(self, sample_srt):
        entries = parse_srt(sample_srt)
        assert [e.start for e in entries] == [1000, 3000, 6000, 8000]
        assert [e.end for e in entries] == [2500, 5000, 7000, 9500]
        assert entries[0].text == "東京に行く"

    def test_multiline_text_joined_with_space(self, sample_srt):
        entries = parse_srt(sample_srt)
        assert entries[1].text == "日本語を 勉強する"

    def test_crlf_line_endings(self):
        content = "1\r\n00:00:01,000 --> 00:00:02,000\r\nこんにちは\r\n\r\n2\r\n00:00:03,000 --> 00:00:04,000\r\nさようなら\r\n"
        entries = parse_srt(content)
        assert entries == [
            SubtitleEntry(1000, 2000, "こんにちは"),
            SubtitleEntry(3000, 4000, "さようなら"),
        ]

    def test_bom_is_ignored(self):
        entries = parse_srt("\ufeff1\n00:00:01,000 --> 00:00:02,000\nテスト\n")
        assert len(entries) == 1
        assert entries[0].text == "テスト"

    def test_block_with_too_few_lines_is_skipped(self):
        content = "1\n00:00:01,000 --> 00:00:02,000\n\n2\n00:00:03,000 --> 00:00:04,000\n猫\n"
        entries = parse_srt(content)
        assert [e.text for e in entries] == ["猫"]

    def test_block_without_time_range_is_skipped(self):
        content = "1\nnot a time\n犬\n\n2\n00:00:03,000 --> 00:00:04,000\n猫\n"
        entries = parse_srt(content)
        assert [e.text for e in entries] == ["猫"]

    def test_fullwidth_digits_in_time_range_are_skipped(self):
        content = "1\n０１:00:01,000 --> 00:00:02,000\nA\n"
        assert parse_srt(content) == []

    def test_whitespace_only_block_before_another_is_kept(self, sample_srt):
        entries = parse_srt(sample_srt)
        assert entries[2] == SubtitleEntry(6000, 7000, "   ")

    def test_trailing_whitespace_only_block_is_skipped(self):
        content = "1\n00:00:01,000 --> 00:00:02,000\nA\n\n2\n00:00:03,000 --> 00:00:04,000\n   \n"
        assert parse_srt(content) == [SubtitleEntry(1000, 2000, "A")]

    def test_empty_content(self):
        assert parse_srt("") == []
        assert parse_srt("\n\n\n") == []

    def test_load_srt_file(self, tmp_path, sample_srt):
        path = tmp_path / "episode.srt"
        path.write_text(sample_srt, encoding="utf-8")
        assert len(load_srt_file(path)) == 4


class TestTimeline:

    def test_active_at_boundaries_inclusive(self, sample_srt):
        timeline = Timeline.from_srt(sample_srt)
        assert timeline.active_at(1000).text == "東京に行く"
        assert timeline.active_at(2500).text == "東京に行く"
        assert timeline.active_at(2501) is None
        assert timeline.active_at(999) is None

    def test_overlap_returns_first_in_file_order(self):
        first = SubtitleEntry(0, 5000, "A")
        second = SubtitleEntry(1000, 2000, "B")
        timeline = Timeline([first, second])
        assert timeline.active_at(1500) is first

    def test_returns_same_object_on_repeated_lookups(self, sample_srt):
        timeline = Timeline.from_srt(sample_srt)
        assert timeline.active_at(1200) is timeline.active_at(2000)

    def test_load_replaces_entries(self, sample_srt):
        timeline = Timeline.from_srt(sample_srt)
        timeline.load([SubtitleEntry(0, 10, "x")])
        assert len(timeline) == 1
        assert timeline.active_at(1500) is None

    def test_empty_timeline(self):
        timeline = Timeline()
        assert len(timeline) == 0
        assert timeline.active_at(0) is None
        assert list(timeline) == []

    @pytest.mark.parametrize("time_ms", [-1, 10**9])
    def test_far_outside_range(self, sample_srt, time_ms):
        assert Timeline.from_srt(sample_srt).active_at(time_ms) is None
