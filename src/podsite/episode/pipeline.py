"""Per-episode pipeline: merge, derive, render, emit side files."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from podsite.config.manager import load_document, merge
from podsite.config.schema import BuildSettings
from podsite.episode.chapters import collect_chapter_markers
from podsite.episode.derive import FieldDeriver
from podsite.episode.models import BuildContext, ChapterMarker, RenderedEpisode
from podsite.output.manager import OutputManager
from podsite.render.template import BUILD_DATE_KEY, TemplateKind, render
from podsite.site.pages import PageRenderer
from podsite.utils.errors import ConfigParseError, SecurityError, TemplateError
from podsite.utils.text import is_blank, slugify, to_text

logger = logging.getLogger(__name__)

CHAPTERS_URL_KEY = "ITEM_PODCAST_CHAPTERS_URL"
CHAPTERS_KEY = "ITEM_CHAPTERS"


def chapters_output_path(chapters_url: str) -> str:
    """Path of a chapters URL, relative to the output root.

    Returns "" when the URL has no path component.

    Example:
        >>> chapters_output_path("https://podcast.example.com/chapters/s1e1.json")
        'chapters/s1e1.json'
    """
    return urlparse(chapters_url).path.lstrip("/")


class EpisodePipeline:
    """Turn one episode directory into a rendered item and its side files.

    The computation (merge, derive, render) is the same in every mode. Only
    the OutputManager decides whether chapters JSON and HTML pages reach disk.
    """

    def __init__(
        self,
        settings: BuildSettings,
        context: BuildContext,
        output: OutputManager,
        deriver: FieldDeriver | None = None,
        pages: PageRenderer | None = None,
    ):
        """Initialize the pipeline.

        Args:
            settings: Build settings (file names, page policy)
            context: Run-wide values (build date, mode)
            output: Gate for filesystem writes
            deriver: Field deriver (default: no external tools)
            pages: HTML page renderer
        """
        self.settings = settings
        self.context = context
        self.output = output
        self.deriver = deriver or FieldDeriver(audio_filename=settings.audio_filename)
        self.pages = pages or PageRenderer()

    def process(
        self,
        episode_dir: Path,
        global_config: Mapping[str, Any],
        item_template: str,
        chapters_template: str | None = None,
    ) -> RenderedEpisode | None:
        """Process one episode directory.

        Args:
            episode_dir: Episode directory
            global_config: Global config document
            item_template: Item template text (``[KEY]`` syntax)
            chapters_template: Chapters template text (``{{KEY}}`` syntax), if any

        Returns:
            RenderedEpisode, or None if the episode was skipped
        """
        name = episode_dir.name
        meta_path = episode_dir / self.settings.meta_filename

        if not meta_path.is_file():
            logger.warning(f"Skipping {name} (missing {self.settings.meta_filename})")
            return None

        try:
            document = load_document(meta_path)
        except ConfigParseError as e:
            logger.warning(f"Skipping {name}: {e}")
            return None

        global_values = {**global_config, BUILD_DATE_KEY: self.context.last_build_date}
        fields = self.deriver.derive(merge(global_values, document), episode_dir, document)

        try:
            fragment = render(item_template, fields, TemplateKind.XML)
        except TemplateError as e:
            logger.error(f"Skipping {name}: item did not render: {e}")
            return None

        chapters = collect_chapter_markers(fields)
        episode = RenderedEpisode(
            directory_name=name,
            slug=slugify(fields.get("ITEM_TITLE")) or name,
            fields=fields,
            fragment=fragment,
            chapters=chapters,
            chapters_json=self._render_chapters(name, fields, chapters, chapters_template),
        )

        self._emit_chapters(episode)
        self._emit_page(episode, global_config)

        return episode

    def _render_chapters(
        self,
        name: str,
        fields: dict[str, Any],
        chapters: list[ChapterMarker],
        chapters_template: str | None,
    ) -> str | None:
        if chapters_template is None or is_blank(fields.get(CHAPTERS_URL_KEY)):
            return None

        values = {**fields, CHAPTERS_KEY: [marker.to_json_dict() for marker in chapters]}
        try:
            return render(chapters_template, values, TemplateKind.JSON)
        except TemplateError as e:
            logger.error(f"{name}: chapters file not written: {e}")
            return None

    def _emit_chapters(self, episode: RenderedEpisode) -> None:
        if episode.chapters_json is None:
            return

        chapters_url = to_text(episode.fields[CHAPTERS_URL_KEY])
        relative = chapters_output_path(chapters_url)
        if not relative:
            logger.warning(
                f"{episode.directory_name}: chapters URL {chapters_url} has no path; "
                "chapters file not written"
            )
            return
        self._write(episode.directory_name, relative, episode.chapters_json)

    def _emit_page(self, episode: RenderedEpisode, global_config: Mapping[str, Any]) -> None:
        relative = f"{self.settings.episode_pages_dir}/{episode.page_filename}"

        if self.settings.html_page_policy == "create-if-absent":
            content = self.pages.render_placeholder()
            self._write(episode.directory_name, relative, content, overwrite=False)
        else:
            content = self.pages.render_episode(episode, global_config)
            self._write(episode.directory_name, relative, content)

    def _write(self, name: str, relative: str, content: str, overwrite: bool = True) -> None:
        try:
            self.output.write_text(relative, content, overwrite=overwrite)
        except (SecurityError, OSError) as e:
            logger.error(f"{name}: could not write {relative}: {e}")
