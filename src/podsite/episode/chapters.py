"""Chapter marker collection.

Chapters are authored as flat key pairs in the episode metadata:

    CHAPTER_1_START_TIME: 0
    CHAPTER_1_TITLE: Intro
    CHAPTER_2_START_TIME: 95
    CHAPTER_2_TITLE: Main topic
"""

import logging
from collections.abc import Mapping
from typing import Any

from podsite.episode.models import ChapterMarker
from podsite.utils.text import is_blank, to_text

logger = logging.getLogger(__name__)

START_SUFFIX = "_START_TIME"
TITLE_SUFFIX = "_TITLE"


def parse_start_time(value: Any) -> int | None:
    """Parse a start time as a non-negative whole number of seconds."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value >= 0 else None

    text = str(value).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def collect_chapter_markers(mapping: Mapping[str, Any]) -> list[ChapterMarker]:
    """Collect chapter markers from ``<PREFIX>_START_TIME``/``<PREFIX>_TITLE`` pairs.

    Markers without a title or with an invalid start time are dropped. The
    result is sorted by start time; ties keep mapping order.
    """
    markers: list[ChapterMarker] = []

    for key, value in mapping.items():
        if not key.endswith(START_SUFFIX) or key == START_SUFFIX:
            continue

        prefix = key[: -len(START_SUFFIX)]
        title = mapping.get(f"{prefix}{TITLE_SUFFIX}")
        if is_blank(title):
            logger.debug(f"Dropping chapter {prefix}: no {prefix}{TITLE_SUFFIX}")
            continue

        start_time = parse_start_time(value)
        if start_time is None:
            logger.debug(f"Dropping chapter {prefix}: invalid start time {value!r}")
            continue

        markers.append(ChapterMarker(start_time=start_time, title=to_text(title).strip()))

    markers.sort(key=lambda marker: marker.start_time)
    return markers
