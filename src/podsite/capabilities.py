"""Optional external tools used while deriving fields and formatting output.

Each capability wraps one binary behind a small contract:

- DurationProbe: audio path -> duration in seconds (``ffprobe``)
- MimeSniffer: file path -> best-guess MIME type or "" (``file``)
- XmlPrettyPrinter: reformat an XML file in place (``xmllint``)

All of them are optional. A missing binary or a failed call raises
CapabilityError (or returns "" for the sniffer); callers degrade the output
instead of aborting the run.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from podsite.utils.errors import CapabilityError

logger = logging.getLogger(__name__)


class ToolCapability(ABC):
    """Base class for capabilities backed by an external binary."""

    NAME: ClassVar[str]
    BINARY: ClassVar[str]

    def is_available(self) -> bool:
        """Whether the binary is on PATH."""
        return shutil.which(self.BINARY) is not None

    def _run(self, args: list[str]) -> str:
        """Run the binary and return its stdout.

        Raises:
            CapabilityError: If the binary is missing or exits non-zero
        """
        if not self.is_available():
            raise CapabilityError(f"{self.BINARY} not found on PATH")

        try:
            completed = subprocess.run(
                [self.BINARY, *args],
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise CapabilityError(f"{self.BINARY} not found on PATH") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise CapabilityError(
                f"{self.BINARY} exited with status {e.returncode}: {stderr}"
            ) from e

        return completed.stdout


class DurationProbe(ToolCapability):
    """Contract: return the playback duration of an audio file in seconds."""

    @abstractmethod
    def probe(self, path: Path) -> float:
        """Probe ``path``.

        Raises:
            CapabilityError: If the duration cannot be determined
        """


class MimeSniffer(ToolCapability):
    """Contract: guess a file's MIME type, returning "" when unknown."""

    @abstractmethod
    def sniff(self, path: Path) -> str:
        """Sniff ``path``."""


class XmlPrettyPrinter(ToolCapability):
    """Contract: reformat a well-formed XML file in place."""

    @abstractmethod
    def format_file(self, path: Path) -> None:
        """Format ``path`` in place.

        Raises:
            CapabilityError: If the tool is unavailable or formatting fails
        """


class FFprobeDurationProbe(DurationProbe):
    """Duration probe using ``ffprobe``."""

    NAME = "duration"
    BINARY = "ffprobe"

    def probe(self, path: Path) -> float:
        stdout = self._run(
            [
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=nw=1:nk=1",
                str(path),
            ]
        ).strip()

        try:
            return float(stdout)
        except ValueError as e:
            raise CapabilityError(f"ffprobe returned no duration for {path}") from e


class FileMimeSniffer(MimeSniffer):
    """MIME sniffer using ``file --mime-type``."""

    NAME = "mime"
    BINARY = "file"

    def sniff(self, path: Path) -> str:
        try:
            return self._run(["-b", "--mime-type", str(path)]).strip()
        except CapabilityError as e:
            logger.debug(f"MIME sniffing failed for {path}: {e}")
            return ""


class XmllintPrettyPrinter(XmlPrettyPrinter):
    """XML pretty-printer using ``xmllint --format``."""

    NAME = "xml-format"
    BINARY = "xmllint"

    def format_file(self, path: Path) -> None:
        formatted = self._run(["--format", str(path)])
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(formatted, encoding="utf-8")
        tmp_path.replace(path)


@dataclass
class Capabilities:
    """Bundle of the optional tools a build may use.

    Any member may be None, which behaves like an unavailable tool.
    """

    duration_probe: DurationProbe | None = field(default_factory=FFprobeDurationProbe)
    mime_sniffer: MimeSniffer | None = field(default_factory=FileMimeSniffer)
    xml_formatter: XmlPrettyPrinter | None = field(default_factory=XmllintPrettyPrinter)

    @classmethod
    def detect(cls) -> "Capabilities":
        """Create the default bundle and log which tools are missing."""
        capabilities = cls()
        for tool in (
            capabilities.duration_probe,
            capabilities.mime_sniffer,
            capabilities.xml_formatter,
        ):
            if tool is not None and not tool.is_available():
                logger.info(f"{tool.BINARY} not found; {tool.NAME} capability disabled")
        return capabilities

    @classmethod
    def none(cls) -> "Capabilities":
        """A bundle with every tool disabled."""
        return cls(duration_probe=None, mime_sniffer=None, xml_formatter=None)
