"""In-place pretty-printing of the feed document.

Tries ``xmllint --format`` first, then the standard library's minidom, and
leaves the file as written if both fail. Formatting is never fatal.
"""

import logging
import xml.dom.minidom as minidom
from enum import Enum
from pathlib import Path
from xml.parsers.expat import ExpatError

from podsite.capabilities import XmlPrettyPrinter
from podsite.utils.errors import CapabilityError

logger = logging.getLogger(__name__)


class FormatResult(str, Enum):
    """Which formatter handled the document."""

    XMLLINT = "xmllint"
    MINIDOM = "minidom"
    UNFORMATTED = "unformatted"


def minidom_pretty(xml_text: str) -> str:
    """Pretty-print XML with minidom, dropping the blank lines it adds.

    Raises:
        ExpatError: If the document is not well-formed
    """
    document = minidom.parseString(xml_text.encode("utf-8"))
    pretty = document.toprettyxml(indent="  ", encoding="utf-8").decode("utf-8")
    return "\n".join(line for line in pretty.splitlines() if line.strip()) + "\n"


class FeedFormatter:
    """Format a written feed file in place."""

    def __init__(self, xml_formatter: XmlPrettyPrinter | None = None):
        """Initialize the formatter.

        Args:
            xml_formatter: External pretty-printer, tried first when available
        """
        self.xml_formatter = xml_formatter

    def format_file(self, path: Path) -> FormatResult:
        """Pretty-print ``path`` in place using the best available formatter."""
        if self.xml_formatter is not None and self.xml_formatter.is_available():
            try:
                self.xml_formatter.format_file(path)
                return FormatResult.XMLLINT
            except (CapabilityError, OSError) as e:
                logger.warning(f"{self.xml_formatter.BINARY} could not format {path}: {e}")

        try:
            path.write_text(minidom_pretty(path.read_text(encoding="utf-8")), encoding="utf-8")
            return FormatResult.MINIDOM
        except (ExpatError, OSError) as e:
            logger.warning(f"Leaving {path} unformatted: {e}")
            return FormatResult.UNFORMATTED
