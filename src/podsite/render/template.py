"""Placeholder substitution for feed and chapter templates.

Two template kinds are supported:

- XML templates use ``[KEY]`` placeholders. Values are XML-escaped unless the
  key is mapped to another escaper (rich content is injected raw inside CDATA,
  categories expand into ``<category>`` elements).
- JSON templates use ``{{KEY}}`` placeholders. Strings are JSON-escaped in
  place; numbers, booleans, lists and mappings become JSON literals and drop
  the quotes around a quoted placeholder. The result must parse as JSON.

Placeholders without a value are left untouched so missing fields stay visible
in the output. Substitution is a single pass over the template: text inserted
for one placeholder is never scanned again.
"""

import json
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from podsite.render.escaping import (
    Escape,
    json_literal,
    json_string,
    xml_categories,
    xml_escape,
)
from podsite.utils.errors import TemplateRenderError
from podsite.utils.text import is_blank, normalize_categories, to_text

CONTENT_KEY = "ITEM_CONTENT_ENCODED"
CATEGORIES_KEY = "ITEM_CATEGORIES"
ITEMS_KEY = "ITEMS"
BUILD_DATE_KEY = "LASTBUILDDATE"

XML_ESCAPES: dict[str, Escape] = {
    CONTENT_KEY: Escape.RAW,
    CATEGORIES_KEY: Escape.XML_CATEGORIES,
    ITEMS_KEY: Escape.RAW,
}

_XML_PLACEHOLDER_RE = re.compile(r"\[([A-Za-z_][A-Za-z0-9_]*)\]")
_JSON_PLACEHOLDER_RE = re.compile(r'("?)\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}("?)')

_JSON_NATIVE = (bool, int, float, list, tuple, dict)


class TemplateKind(str, Enum):
    """Template syntaxes and their escaping regimes."""

    XML = "xml"
    JSON = "json"


def render(
    template_text: str,
    mapping: Mapping[str, Any],
    escape_mode: TemplateKind,
    escapes: Mapping[str, Escape] | None = None,
) -> str:
    """Render a template.

    Args:
        template_text: Template source
        mapping: Placeholder values
        escape_mode: Which syntax and default escaping to use
        escapes: Per-key escaper overrides for XML templates (defaults to
            XML_ESCAPES)

    Returns:
        Rendered text

    Raises:
        TemplateRenderError: If a JSON template does not render to valid JSON
    """
    if escape_mode is TemplateKind.JSON:
        return render_json(template_text, mapping)
    return render_xml(template_text, mapping, escapes)


def escape_for(
    key: str, value: Any, kind: TemplateKind, escapes: Mapping[str, Escape] | None = None
) -> Escape:
    """Pick the escaper for one placeholder."""
    if kind is TemplateKind.JSON:
        if isinstance(value, _JSON_NATIVE):
            return Escape.JSON_LITERAL
        return Escape.JSON_STRING
    return (XML_ESCAPES if escapes is None else escapes).get(key, Escape.XML_TEXT)


def render_xml(
    template_text: str,
    mapping: Mapping[str, Any],
    escapes: Mapping[str, Escape] | None = None,
) -> str:
    """Render a ``[KEY]`` template.

    Example:
        >>> render_xml("<title>[TITLE]</title> [MISSING]", {"TITLE": "A & B"})
        '<title>A &amp; B</title> [MISSING]'
    """

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in mapping:
            return match.group(0)

        value = mapping[key]
        escape = escape_for(key, value, TemplateKind.XML, escapes)

        if escape is Escape.XML_CATEGORIES:
            if value is None:
                return match.group(0)
            indent = _line_indent(template_text, match.start())
            return xml_categories(normalize_categories(value), indent)

        if is_blank(value) or isinstance(value, (list, tuple, dict)):
            return match.group(0)
        if escape is Escape.RAW:
            return to_text(value)
        return xml_escape(value)

    return _XML_PLACEHOLDER_RE.sub(substitute, template_text)


def render_json(template_text: str, mapping: Mapping[str, Any]) -> str:
    """Render a ``{{KEY}}`` template and validate the result.

    Returns:
        The rendered document, re-serialized with two-space indentation and a
        trailing newline.

    Raises:
        TemplateRenderError: If the rendered text is not valid JSON
    """

    def substitute(match: re.Match[str]) -> str:
        open_quote, key, close_quote = match.groups()
        if key not in mapping:
            return match.group(0)

        value = mapping[key]
        if value is None or (isinstance(value, str) and is_blank(value)):
            return match.group(0)

        if escape_for(key, value, TemplateKind.JSON) is Escape.JSON_LITERAL:
            literal = json_literal(value)
            if open_quote and close_quote:
                return literal
            return f"{open_quote}{literal}{close_quote}"

        return f"{open_quote}{json_string(value)}{close_quote}"

    rendered = _JSON_PLACEHOLDER_RE.sub(substitute, template_text)

    try:
        document = json.loads(rendered)
    except json.JSONDecodeError as e:
        raise TemplateRenderError(f"Rendered JSON is invalid: {e}") from e

    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def _line_indent(text: str, position: int) -> str:
    """Whitespace preceding ``position`` on its line, or "" if there is text."""
    line_start = text.rfind("\n", 0, position) + 1
    prefix = text[line_start:position]
    return prefix if not prefix.strip() else ""
