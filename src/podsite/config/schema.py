"""Build settings schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

HtmlPagePolicy = Literal["regenerate", "create-if-absent"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class BuildSettings(BaseModel):
    """Locations and policies for one site build.

    Relative paths are resolved against the project root.
    """

    # Inputs
    config_file: Path = Field(default=Path("config.yml"))
    episodes_dir: Path = Field(default=Path("podcast"))
    meta_filename: str = "meta.yml"
    audio_filename: str = "audio.mp3"

    # Templates
    global_template: Path = Field(default=Path("podcast_global.xml"))
    item_template: Path = Field(default=Path("podcast_item.xml"))
    chapters_template: Path = Field(default=Path("podcast_chapters.json"))

    # Outputs
    output_dir: Path = Field(default=Path("docs"))
    feed_filename: str = "podcast.xml"
    episode_pages_dir: str = "episodes"

    # Policies
    html_page_policy: HtmlPagePolicy = "regenerate"
    log_level: LogLevel = "INFO"

    def resolve(self, project_root: Path, value: Path) -> Path:
        """Resolve a configured path against the project root."""
        return value if value.is_absolute() else project_root / value
