"""Template rendering with per-placeholder escaping."""

from podsite.render.escaping import Escape, json_string, xml_categories, xml_escape
from podsite.render.template import (
    BUILD_DATE_KEY,
    CATEGORIES_KEY,
    CONTENT_KEY,
    ITEMS_KEY,
    XML_ESCAPES,
    TemplateKind,
    escape_for,
    render,
    render_json,
    render_xml,
)

__all__ = [
    "BUILD_DATE_KEY",
    "CATEGORIES_KEY",
    "CONTENT_KEY",
    "ITEMS_KEY",
    "XML_ESCAPES",
    "Escape",
    "TemplateKind",
    "escape_for",
    "json_string",
    "render",
    "render_json",
    "render_xml",
    "xml_categories",
    "xml_escape",
]
