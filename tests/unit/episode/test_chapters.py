"""Tests for chapter marker collection."""

import pytest
from pydantic import ValidationError

from podsite.episode.chapters import collect_chapter_markers, parse_start_time
from podsite.episode.models import ChapterMarker


class TestParseStartTime:
    """Tests for start time parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, 0),
            (95, 95),
            (12.0, 12),
            ("300", 300),
            (" 42 ", 42),
        ],
    )
    def test_valid_values(self, value: object, expected: int) -> None:
        assert parse_start_time(value) == expected

    @pytest.mark.parametrize("value", [None, True, -1, 1.5, "abc", "-5", "1e3", "", "٣"])
    def test_invalid_values(self, value: object) -> None:
        assert parse_start_time(value) is None


class TestCollectChapterMarkers:
    """Tests for collecting markers from a mapping."""

    def test_sorted_by_start_time(self) -> None:
        mapping = {
            "CHAPTER_2_START_TIME": 90,
            "CHAPTER_2_TITLE": "Main topic",
            "CHAPTER_1_START_TIME": "0",
            "CHAPTER_1_TITLE": "Intro",
        }

        markers = collect_chapter_markers(mapping)

        assert [(m.start_time, m.title) for m in markers] == [(0, "Intro"), (90, "Main topic")]

    def test_marker_without_title_is_dropped(self) -> None:
        mapping = {"CHAPTER_1_START_TIME": 0, "CHAPTER_2_START_TIME": 5, "CHAPTER_2_TITLE": "Two"}

        assert [m.title for m in collect_chapter_markers(mapping)] == ["Two"]

    def test_marker_with_invalid_time_is_dropped(self) -> None:
        mapping = {"OUTRO_START_TIME": "soon", "OUTRO_TITLE": "Bye"}

        assert collect_chapter_markers(mapping) == []

    def test_titles_are_trimmed(self) -> None:
        mapping = {"A_START_TIME": 1, "A_TITLE": "  Spaced  "}

        assert collect_chapter_markers(mapping)[0].title == "Spaced"

    def test_unrelated_keys_are_ignored(self) -> None:
        assert collect_chapter_markers({"ITEM_TITLE": "x", "PODCAST_NAME": "y"}) == []


class TestChapterMarker:
    """Tests for the ChapterMarker model."""

    def test_json_representation(self) -> None:
        marker = ChapterMarker(start_time=65, title="Intro")

        assert marker.to_json_dict() == {"startTime": 65, "title": "Intro"}

    def test_negative_start_time_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChapterMarker(start_time=-1, title="Intro")
