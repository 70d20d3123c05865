"""HTML page rendering for episode pages and the season index."""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, PackageLoader, select_autoescape

from podsite.render.template import CONTENT_KEY
from podsite.utils.datetime import format_hhmmss
from podsite.utils.text import is_blank, to_text

if TYPE_CHECKING:
    from podsite.episode.models import RenderedEpisode

EPISODE_TEMPLATE = "episode.html"
COMING_SOON_TEMPLATE = "coming_soon.html"
INDEX_TEMPLATE = "index.html"


def group_by_season(
    episodes: Iterable["RenderedEpisode"],
) -> list[tuple[int | None, list["RenderedEpisode"]]]:
    """Group episodes by season, sorted by (season, episode number).

    Episodes without a season number come last, under a ``None`` season.
    """

    def sort_key(episode: "RenderedEpisode") -> tuple[Any, ...]:
        season = episode.season_number
        number = episode.episode_number
        return (
            season is None,
            season or 0,
            number is None,
            number or 0,
            episode.directory_name,
        )

    groups: list[tuple[int | None, list["RenderedEpisode"]]] = []
    for episode in sorted(episodes, key=sort_key):
        season = episode.season_number
        if groups and groups[-1][0] == season:
            groups[-1][1].append(episode)
        else:
            groups.append((season, [episode]))
    return groups


class PageRenderer:
    """Render site pages from the packaged Jinja2 templates."""

    def __init__(self, environment: Environment | None = None):
        self.environment = environment or Environment(
            loader=PackageLoader("podsite", "site/templates"),
            autoescape=select_autoescape(["html"]),
            keep_trailing_newline=True,
        )
        self.environment.filters["hhmmss"] = format_hhmmss

    def render_episode(
        self, episode: "RenderedEpisode", podcast: Mapping[str, Any] | None = None
    ) -> str:
        """Full detail page for one episode."""
        fields = episode.fields
        return self.environment.get_template(EPISODE_TEMPLATE).render(
            episode=episode,
            podcast_name=_text(fields.get("PODCAST_NAME") or (podcast or {}).get("PODCAST_NAME")),
            subtitle=_text(fields.get("ITEM_SUBTITLE")),
            description=_text(fields.get("ITEM_DESCRIPTION")),
            pub_date=_text(fields.get("ITEM_PUBDATE")),
            duration=_text(fields.get("ITEM_DURATION")),
            audio_url=_audio_url(fields, podcast or {}),
            audio_type=_text(fields.get("ITEM_ENCLOSURE_TYPE")),
            image_url=_text(fields.get("ITEM_ITUNES_IMAGE_HREF")),
            content_html=_text(fields.get(CONTENT_KEY)),
        )

    def render_placeholder(self) -> str:
        """Placeholder "Coming soon!" page for the create-if-absent policy."""
        return self.environment.get_template(COMING_SOON_TEMPLATE).render()

    def render_index(
        self, episodes: Iterable["RenderedEpisode"], podcast: Mapping[str, Any] | None = None
    ) -> str:
        """Index page listing every episode grouped by season."""
        podcast = podcast or {}
        return self.environment.get_template(INDEX_TEMPLATE).render(
            podcast_name=_text(podcast.get("PODCAST_NAME")),
            podcast_description=_text(podcast.get("PODCAST_DESCRIPTION")),
            seasons=group_by_season(episodes),
        )


def _text(value: Any) -> str:
    return "" if is_blank(value) else to_text(value)


def _audio_url(fields: Mapping[str, Any], podcast: Mapping[str, Any]) -> str:
    """Enclosure URL, else ``{PODCAST_LINK}/{ITEM_PATH}``."""
    explicit = _text(fields.get("ITEM_ENCLOSURE_URL"))
    if explicit:
        return explicit

    link = _text(fields.get("PODCAST_LINK") or podcast.get("PODCAST_LINK")).strip().rstrip("/")
    path = _text(fields.get("ITEM_PATH")).lstrip("/")
    if not link or not path:
        return ""
    return f"{link}/{path}"
