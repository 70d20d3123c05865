"""Feed document assembly."""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from podsite.config.manager import merge
from podsite.feed.formatter import FeedFormatter, FormatResult
from podsite.output.manager import OutputManager
from podsite.render.template import BUILD_DATE_KEY, ITEMS_KEY, TemplateKind, render

logger = logging.getLogger(__name__)


def join_fragments(fragments: Iterable[str]) -> str:
    """Concatenate item fragments, each followed by a blank line."""
    return "".join(fragment.rstrip("\n") + "\n\n" for fragment in fragments)


class FeedAssembler:
    """Render the global feed template around the episode fragments."""

    def __init__(self, output: OutputManager, formatter: FeedFormatter | None = None):
        """Initialize the assembler.

        Args:
            output: Gate for filesystem writes
            formatter: Pretty-printer applied after the feed is written
        """
        self.output = output
        self.formatter = formatter or FeedFormatter()

    def assemble(
        self,
        episode_fragments: Iterable[str],
        global_config: Mapping[str, Any],
        global_template: str,
        last_build_date: str,
    ) -> str:
        """Build the feed document.

        ``[ITEMS]`` is injected raw; every other global key, including
        ``[LASTBUILDDATE]``, is XML-escaped.

        Returns:
            The document text, ending with a single newline
        """
        values = merge(global_config, None)
        values[ITEMS_KEY] = join_fragments(episode_fragments)
        values[BUILD_DATE_KEY] = last_build_date

        document = render(global_template, values, TemplateKind.XML)
        return document.rstrip("\n") + "\n"

    def publish(self, document: str, feed_path: str) -> Path | None:
        """Write the feed and pretty-print it in place.

        Returns:
            The written path, or None in compose mode

        Raises:
            SecurityError: If ``feed_path`` escapes the output directory
            OSError: If the feed cannot be written
        """
        path = self.output.write_text(feed_path, document)
        if path is None:
            return None

        result = self.formatter.format_file(path)
        if result is FormatResult.UNFORMATTED:
            logger.info(f"Wrote {path} (unformatted)")
        else:
            logger.info(f"Wrote {path} (formatted with {result.value})")
        return path
