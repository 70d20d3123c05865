"""Site build orchestration.

A build runs in one of two modes, fixed for the whole run:

- compose: everything is computed in memory; nothing on disk changes
- publish: generated directories are reset and every artifact is written

Steps:
1. Load templates (a missing item or global template stops the build)
2. Compute the build date once
3. Run the episode pipeline over every episode directory, in name order
4. Write the season index page
5. Assemble, write and format the feed
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from podsite.capabilities import Capabilities
from podsite.config.manager import ConfigManager
from podsite.config.schema import BuildSettings
from podsite.episode.derive import FieldDeriver
from podsite.episode.models import BuildContext, RenderedEpisode
from podsite.episode.pipeline import EpisodePipeline
from podsite.feed.assembler import FeedAssembler
from podsite.feed.formatter import FeedFormatter
from podsite.output.manager import OutputManager, WriteMode
from podsite.site.pages import PageRenderer
from podsite.utils.datetime import format_rss_date, now_utc
from podsite.utils.errors import SecurityError, TemplateNotFoundError

logger = logging.getLogger(__name__)

INDEX_PAGE = "index.html"


@dataclass
class Templates:
    """Template texts for one build."""

    item: str
    global_: str
    chapters: str | None = None


@dataclass
class BuildResult:
    """Outcome of a build."""

    document: str
    last_build_date: str
    mode: WriteMode
    episodes: list[RenderedEpisode] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    feed_path: Path | None = None


class SiteBuilder:
    """Build the feed, chapter files and pages for a project directory.

    Example:
        >>> builder = SiteBuilder(Path("my-podcast"), mode=WriteMode.COMPOSE)
        >>> result = builder.build()
        >>> print(result.document)
    """

    def __init__(
        self,
        project_root: Path,
        settings: BuildSettings | None = None,
        mode: WriteMode = WriteMode.COMPOSE,
        capabilities: Capabilities | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        """Initialize the builder.

        Args:
            project_root: Directory holding config, templates and episodes
            settings: Build settings (default: loaded from podsite.yaml)
            mode: Execution mode for the whole run
            capabilities: External tools (default: detected on PATH)
            clock: Source of the build date
        """
        self.config_manager = ConfigManager(project_root)
        self.project_root = self.config_manager.project_root
        self.settings = settings or self.config_manager.load_settings()
        self.mode = mode
        self.capabilities = capabilities if capabilities is not None else Capabilities.detect()
        self.clock = clock

    def path(self, value: Path) -> Path:
        return self.settings.resolve(self.project_root, value)

    def load_templates(self) -> Templates:
        """Read the templates.

        Raises:
            TemplateNotFoundError: If the item or global template is missing
        """
        item_path = self.path(self.settings.item_template)
        if not item_path.is_file():
            raise TemplateNotFoundError("item", item_path)

        global_path = self.path(self.settings.global_template)
        if not global_path.is_file():
            raise TemplateNotFoundError("global", global_path)

        chapters_path = self.path(self.settings.chapters_template)
        chapters = None
        if chapters_path.is_file():
            chapters = chapters_path.read_text(encoding="utf-8")
        else:
            logger.warning(f"Chapters template not found: {chapters_path}; no chapter files")

        return Templates(
            item=item_path.read_text(encoding="utf-8"),
            global_=global_path.read_text(encoding="utf-8"),
            chapters=chapters,
        )

    def episode_directories(self) -> list[Path]:
        """Episode directories sorted by name."""
        episodes_dir = self.path(self.settings.episodes_dir)
        if not episodes_dir.is_dir():
            logger.warning(f"Episodes directory not found: {episodes_dir}")
            return []
        return sorted(
            (child for child in episodes_dir.iterdir() if child.is_dir()),
            key=lambda child: child.name,
        )

    def build(self) -> BuildResult:
        """Run the build.

        Returns:
            BuildResult with the feed document and per-episode results

        Raises:
            TemplateNotFoundError: If a required template is missing
        """
        templates = self.load_templates()

        context = BuildContext(last_build_date=format_rss_date(self.clock()), mode=self.mode)
        output = OutputManager(self.path(self.settings.output_dir), self.mode)
        pages = PageRenderer()

        if self.settings.html_page_policy == "regenerate":
            output.reset_directory(self.settings.episode_pages_dir)

        global_config = self.config_manager.load_global_config(self.settings)
        pipeline = EpisodePipeline(
            settings=self.settings,
            context=context,
            output=output,
            deriver=FieldDeriver(self.capabilities, self.settings.audio_filename),
            pages=pages,
        )

        result = BuildResult(document="", last_build_date=context.last_build_date, mode=self.mode)

        for episode_dir in self.episode_directories():
            episode = pipeline.process(
                episode_dir, global_config, templates.item, templates.chapters
            )
            if episode is None:
                result.skipped.append(episode_dir.name)
            else:
                result.episodes.append(episode)

        self._write_index(output, pages, result.episodes, global_config)

        assembler = FeedAssembler(output, FeedFormatter(self.capabilities.xml_formatter))
        result.document = assembler.assemble(
            [episode.fragment for episode in result.episodes],
            global_config,
            templates.global_,
            context.last_build_date,
        )
        result.feed_path = assembler.publish(result.document, self.settings.feed_filename)
        result.written = list(output.written)

        logger.info(
            f"Built {len(result.episodes)} episode(s), skipped {len(result.skipped)} "
            f"({self.mode.value} mode)"
        )
        return result

    def _write_index(
        self,
        output: OutputManager,
        pages: PageRenderer,
        episodes: list[RenderedEpisode],
        global_config: dict,
    ) -> None:
        relative = f"{self.settings.episode_pages_dir}/{INDEX_PAGE}"
        try:
            output.write_text(relative, pages.render_index(episodes, global_config))
        except (SecurityError, OSError) as e:
            logger.error(f"Could not write {relative}: {e}")
