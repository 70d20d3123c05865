"""Data models for episode processing.

This module defines:
- BuildContext (run-wide values passed down explicitly)
- ChapterMarker (one chapter start)
- RenderedEpisode (the in-memory result for one episode directory)
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from podsite.output.manager import WriteMode
from podsite.utils.text import is_blank, normalize_categories, to_text


@dataclass(frozen=True)
class BuildContext:
    """Values computed once per run and shared by every stage."""

    last_build_date: str
    mode: WriteMode = WriteMode.COMPOSE


class ChapterMarker(BaseModel):
    """A chapter start time (seconds) and its title."""

    start_time: int = Field(..., ge=0, description="Start offset in seconds")
    title: str = Field(..., min_length=1, description="Chapter title")

    def to_json_dict(self) -> dict[str, Any]:
        """Podcasting 2.0 chapters representation."""
        return {"startTime": self.start_time, "title": self.title}


class RenderedEpisode(BaseModel):
    """Everything derived and rendered for one episode.

    Example:
        >>> episode = RenderedEpisode(
        ...     directory_name="s1e3",
        ...     slug="hello-world",
        ...     fields={"ITEM_SEASON": "1", "ITEM_EPISODE": "3"},
        ...     fragment="<item>...</item>",
        ... )
        >>> episode.season_number, episode.episode_number
        (1, 3)
    """

    directory_name: str = Field(..., description="Episode directory name")
    slug: str = Field(..., description="Slug used for the episode page")
    fields: dict[str, Any] = Field(default_factory=dict, description="Derived mapping")
    fragment: str = Field(..., description="Rendered item fragment")
    chapters: list[ChapterMarker] = Field(default_factory=list)
    chapters_json: str | None = Field(None, description="Rendered chapters document")

    @property
    def title(self) -> str:
        value = self.fields.get("ITEM_TITLE")
        return self.directory_name if is_blank(value) else to_text(value)

    @property
    def season_number(self) -> int | None:
        return _as_int(self.fields.get("ITEM_SEASON"))

    @property
    def episode_number(self) -> int | None:
        return _as_int(self.fields.get("ITEM_EPISODE"))

    @property
    def categories(self) -> list[str]:
        return normalize_categories(self.fields.get("ITEM_CATEGORIES"))

    @property
    def page_filename(self) -> str:
        return f"{self.slug}.html"


def _as_int(value: Any) -> int | None:
    if is_blank(value) or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
