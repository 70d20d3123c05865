"""Utility functions and helpers for podsite."""

from podsite.utils.datetime import format_hhmmss, format_rss_date, now_utc
from podsite.utils.errors import (
    CapabilityError,
    ConfigError,
    ConfigParseError,
    InvalidConfigError,
    PodsiteError,
    SecurityError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from podsite.utils.text import is_blank, normalize_categories, slugify, to_text

__all__ = [
    # Errors
    "PodsiteError",
    "ConfigError",
    "InvalidConfigError",
    "ConfigParseError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "CapabilityError",
    "SecurityError",
    # Text
    "is_blank",
    "to_text",
    "slugify",
    "normalize_categories",
    # Dates
    "now_utc",
    "format_rss_date",
    "format_hhmmss",
]
