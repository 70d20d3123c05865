"""Shared fixtures: a sample podcast project and fake external tools."""

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from podsite.capabilities import Capabilities, DurationProbe, MimeSniffer
from podsite.utils.errors import CapabilityError

GLOBAL_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd" \
xmlns:content="http://purl.org/rss/1.0/modules/content/" \
xmlns:podcast="https://podcastindex.org/namespace/1.0">
  <channel>
    <title>[PODCAST_NAME]</title>
    <link>[PODCAST_LINK]</link>
    <description>[PODCAST_DESCRIPTION]</description>
    <lastBuildDate>[LASTBUILDDATE]</lastBuildDate>
[ITEMS]
  </channel>
</rss>
"""

ITEM_TEMPLATE = """\
    <item>
      <title>[ITEM_TITLE]</title>
      <link>[ITEM_LINK]</link>
      <enclosure url="[PODCAST_LINK]/[ITEM_PATH]" length="[ITEM_ENCLOSURE_LENGTH]" \
type="[ITEM_ENCLOSURE_TYPE]"/>
      <itunes:duration>[ITEM_DURATION]</itunes:duration>
      <itunes:season>[ITEM_SEASON]</itunes:season>
      <itunes:episode>[ITEM_EPISODE]</itunes:episode>
      <podcast:chapters url="[ITEM_PODCAST_CHAPTERS_URL]" type="[ITEM_PODCAST_CHAPTERS_TYPE]"/>
      <content:encoded><![CDATA[[ITEM_CONTENT_ENCODED]]]></content:encoded>
      [ITEM_CATEGORIES]
    </item>
"""

CHAPTERS_TEMPLATE = """\
{
  "version": "1.2.0",
  "title": "{{ITEM_TITLE}}",
  "podcastName": "{{PODCAST_NAME}}",
  "chapters": {{ITEM_CHAPTERS}}
}
"""

GLOBAL_CONFIG = {
    "PODCAST_NAME": "Test Cast",
    "PODCAST_LINK": "https://podcast.example.com/",
    "PODCAST_DESCRIPTION": "Tests & more",
}

FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeDurationProbe(DurationProbe):
    """Duration probe returning a fixed value, or failing when seconds is None."""

    NAME = "duration"
    BINARY = "fake-ffprobe"

    def __init__(self, seconds: float | None = None):
        self.seconds = seconds
        self.calls: list[Path] = []

    def is_available(self) -> bool:
        return True

    def probe(self, path: Path) -> float:
        self.calls.append(path)
        if self.seconds is None:
            raise CapabilityError("probe failed")
        return self.seconds


class FakeMimeSniffer(MimeSniffer):
    """MIME sniffer returning a fixed answer."""

    NAME = "mime"
    BINARY = "fake-file"

    def __init__(self, mime: str = ""):
        self.mime = mime
        self.calls: list[Path] = []

    def is_available(self) -> bool:
        return True

    def sniff(self, path: Path) -> str:
        self.calls.append(path)
        return self.mime


@pytest.fixture
def fake_probe() -> Callable[..., FakeDurationProbe]:
    """Factory for fake duration probes."""
    return FakeDurationProbe


@pytest.fixture
def fake_sniffer() -> Callable[..., FakeMimeSniffer]:
    """Factory for fake MIME sniffers."""
    return FakeMimeSniffer


@pytest.fixture
def capabilities() -> Capabilities:
    """Capabilities with a fake probe and no XML pretty-printer."""
    return Capabilities(
        duration_probe=FakeDurationProbe(3723.4),
        mime_sniffer=FakeMimeSniffer("audio/flac"),
        xml_formatter=None,
    )


@pytest.fixture
def write_episode() -> Callable[..., Path]:
    """Factory writing an episode directory with meta.yml and audio."""

    def _write(
        root: Path,
        name: str,
        meta: dict | str | None,
        audio: bytes | None = b"ID3fake-audio",
        audio_filename: str = "audio.mp3",
    ) -> Path:
        episode_dir = root / "podcast" / name
        episode_dir.mkdir(parents=True, exist_ok=True)
        if isinstance(meta, dict):
            (episode_dir / "meta.yml").write_text(yaml.safe_dump(meta, sort_keys=False))
        elif isinstance(meta, str):
            (episode_dir / "meta.yml").write_text(meta)
        if audio is not None:
            (episode_dir / audio_filename).write_bytes(audio)
        return episode_dir

    return _write


@pytest.fixture
def project(tmp_path: Path, write_episode: Callable[..., Path]) -> Path:
    """A project with two valid episodes, s1e1 and s1e2."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "config.yml").write_text(yaml.safe_dump(GLOBAL_CONFIG, sort_keys=False))
    (root / "podcast_global.xml").write_text(GLOBAL_TEMPLATE)
    (root / "podcast_item.xml").write_text(ITEM_TEMPLATE)
    (root / "podcast_chapters.json").write_text(CHAPTERS_TEMPLATE)

    write_episode(
        root,
        "s1e1",
        {
            "title": "First Steps",
            "description": "Where it all begins",
            "categories": ["Technology", "Travel"],
            "content_html": "<p>Show notes with <b>bold</b> text</p>",
            "CHAPTER_2_START_TIME": 90,
            "CHAPTER_2_TITLE": "Main topic",
            "CHAPTER_1_START_TIME": 0,
            "CHAPTER_1_TITLE": "Intro",
        },
    )
    write_episode(
        root,
        "s1e2",
        {
            "itunes": {"title": "Second Wind", "subtitle": "More of it"},
            "categories": "Technology, News",
        },
    )
    return root


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock returning FIXED_NOW."""
    return lambda: FIXED_NOW
