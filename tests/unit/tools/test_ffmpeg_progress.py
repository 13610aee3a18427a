"""Tests for tools/ffmpeg_progress.py."""

import pytest

from ffwatch.tools.ffmpeg_progress import (
    PROGRESS_RECORD_DELIMITER,
    has_progress_marker,
    parse_elapsed_seconds,
    progress_fraction,
)


class TestParseElapsedSeconds:
    """Tests for parse_elapsed_seconds."""

    def test_hours_minutes_seconds(self) -> None:
        record = "   45306kB time=01:02:03.50 bitrate=2287.0kbits/s"
        assert parse_elapsed_seconds(record) == pytest.approx(3723.5)

    def test_two_decimal_fraction(self) -> None:
        assert parse_elapsed_seconds("time=00:02:42.28") == pytest.approx(162.28)

    def test_no_marker_returns_none(self) -> None:
        assert parse_elapsed_seconds("Stream #0:0: Video: h264") is None

    @pytest.mark.parametrize(
        "record",
        ["time=garbage", "time=N/A bitrate=N/A", "time=00:01:02", "time="],
    )
    def test_malformed_marker_returns_zero(self, record: str) -> None:
        assert parse_elapsed_seconds(record) == 0.0

    def test_first_marker_wins(self) -> None:
        record = "time=00:00:01.00 time=00:00:09.00"
        assert parse_elapsed_seconds(record) == pytest.approx(1.0)


class TestProgressFraction:
    """Tests for progress_fraction."""

    def test_normalizes_against_duration(self) -> None:
        assert progress_fraction(30.0, 120.0) == pytest.approx(0.25)

    def test_not_clamped_above_one(self) -> None:
        assert progress_fraction(121.0, 120.0) == pytest.approx(121.0 / 120.0)

    @pytest.mark.parametrize("duration", [None, 0.0, -5.0])
    def test_unusable_duration_returns_none(self, duration) -> None:
        assert progress_fraction(30.0, duration) is None


class TestMarkers:
    """Tests for the record delimiter and marker constants."""

    def test_delimiter_is_bytes(self) -> None:
        assert PROGRESS_RECORD_DELIMITER == b"size="

    def test_has_progress_marker(self) -> None:
        assert has_progress_marker("frame=1 time=00:00:00.04")
        assert not has_progress_marker("frame=1 size=")
