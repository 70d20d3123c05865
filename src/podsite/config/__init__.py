"""Configuration loading, merging and build settings."""

from podsite.config.manager import ConfigManager, load_document, merge
from podsite.config.schema import BuildSettings, HtmlPagePolicy

__all__ = [
    "BuildSettings",
    "ConfigManager",
    "HtmlPagePolicy",
    "load_document",
    "merge",
]
