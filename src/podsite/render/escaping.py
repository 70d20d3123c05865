"""Escapers for template placeholders.

Every placeholder substitution is tagged with one Escape member. The set is
closed; adding a regime means adding a member and a function here.
"""

import json
from enum import Enum
from typing import Any

from podsite.utils.text import to_text

_XML_ENTITIES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


class Escape(str, Enum):
    """Escaping regimes for placeholder values."""

    RAW = "raw"
    XML_TEXT = "xml-text"
    XML_CATEGORIES = "xml-categories"
    JSON_STRING = "json-string"
    JSON_LITERAL = "json-literal"


def xml_escape(value: Any) -> str:
    """Escape a value for an XML text node or attribute value."""
    text = to_text(value)
    for char, entity in _XML_ENTITIES:
        text = text.replace(char, entity)
    return text


def xml_categories(categories: list[str], indent: str = "") -> str:
    """Expand categories into ``<category>`` elements.

    Elements are joined with a newline plus ``indent`` so a placeholder on its
    own indented line keeps the template's layout.

    Example:
        >>> xml_categories(["Technology", "Travel"], "  ")
        '<category>Technology</category>\\n  <category>Travel</category>'
    """
    tags = [f"<category>{xml_escape(category)}</category>" for category in categories]
    return f"\n{indent}".join(tags)


def json_string(value: Any) -> str:
    """Escape a value for use inside an existing JSON string.

    Example:
        >>> json_string('say "hi"')
        'say \\\\"hi\\\\"'
    """
    return json.dumps(to_text(value), ensure_ascii=False)[1:-1]


def json_literal(value: Any) -> str:
    """Serialize a value as a JSON literal (number, boolean, array, object)."""
    return json.dumps(value, ensure_ascii=False, default=str)
