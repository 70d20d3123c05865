"""Tests for placeholder rendering."""

import json

import pytest

from podsite.render import (
    Escape,
    TemplateKind,
    escape_for,
    json_string,
    render,
    render_json,
    render_xml,
    xml_categories,
    xml_escape,
)
from podsite.utils.errors import TemplateRenderError


class TestEscapers:
    """Tests for the escaping functions."""

    def test_xml_escape_replaces_ampersand_first(self) -> None:
        """Test that entities are not escaped twice."""
        assert xml_escape("&lt;") == "&amp;lt;"
        assert xml_escape("<a href=\"x\">'</a>") == (
            "&lt;a href=&quot;x&quot;&gt;&apos;&lt;/a&gt;"
        )

    def test_xml_escape_booleans(self) -> None:
        assert xml_escape(True) == "true"
        assert xml_escape(False) == "false"

    def test_xml_categories_joins_with_indent(self) -> None:
        """Test that each category after the first keeps the indent."""
        result = xml_categories(["A & B", "C"], "      ")

        assert result == "<category>A &amp; B</category>\n      <category>C</category>"

    def test_xml_categories_empty(self) -> None:
        assert xml_categories([]) == ""

    def test_json_string_escapes_quotes_and_newlines(self) -> None:
        assert json_string('say "hi"\nbye') == 'say \\"hi\\"\\nbye'

    def test_json_string_keeps_unicode(self) -> None:
        assert json_string("café") == "café"


class TestEscapeSelection:
    """Tests for choosing an escaper per placeholder."""

    def test_xml_defaults_to_text(self) -> None:
        assert escape_for("ITEM_TITLE", "x", TemplateKind.XML) is Escape.XML_TEXT

    def test_xml_raw_keys(self) -> None:
        assert escape_for("ITEM_CONTENT_ENCODED", "<p/>", TemplateKind.XML) is Escape.RAW
        assert escape_for("ITEMS", "<item/>", TemplateKind.XML) is Escape.RAW

    def test_xml_categories_key(self) -> None:
        assert escape_for("ITEM_CATEGORIES", [], TemplateKind.XML) is Escape.XML_CATEGORIES

    def test_json_by_value_type(self) -> None:
        assert escape_for("X", "text", TemplateKind.JSON) is Escape.JSON_STRING
        assert escape_for("X", 42, TemplateKind.JSON) is Escape.JSON_LITERAL
        assert escape_for("X", [1], TemplateKind.JSON) is Escape.JSON_LITERAL

    def test_custom_escapes_override(self) -> None:
        escapes = {"ITEM_TITLE": Escape.RAW}
        assert escape_for("ITEM_TITLE", "x", TemplateKind.XML, escapes) is Escape.RAW


class TestRenderXml:
    """Tests for ``[KEY]`` templates."""

    def test_escapes_text_values(self) -> None:
        result = render_xml("<title>[ITEM_TITLE]</title>", {"ITEM_TITLE": "Q&A <live>"})

        assert result == "<title>Q&amp;A &lt;live&gt;</title>"

    def test_unknown_placeholder_is_left_untouched(self) -> None:
        result = render_xml("<a>[KNOWN]</a><b>[UNKNOWN]</b>", {"KNOWN": "yes"})

        assert result == "<a>yes</a><b>[UNKNOWN]</b>"

    def test_blank_value_is_left_untouched(self) -> None:
        result = render_xml("<a>[ITEM_SUBTITLE]</a>", {"ITEM_SUBTITLE": "  "})

        assert result == "<a>[ITEM_SUBTITLE]</a>"

    def test_numbers_render_as_text(self) -> None:
        result = render_xml('length="[ITEM_ENCLOSURE_LENGTH]"', {"ITEM_ENCLOSURE_LENGTH": 1024})

        assert result == 'length="1024"'

    def test_content_is_injected_raw(self) -> None:
        template = "<content:encoded><![CDATA[[ITEM_CONTENT_ENCODED]]]></content:encoded>"
        result = render_xml(template, {"ITEM_CONTENT_ENCODED": "<p>Hi & bye</p>"})

        assert result == "<content:encoded><![CDATA[<p>Hi & bye</p>]]></content:encoded>"

    def test_raw_content_is_not_rescanned(self) -> None:
        """Test that placeholders inside inserted content stay literal."""
        template = "[ITEM_CONTENT_ENCODED] [ITEM_TITLE]"
        mapping = {"ITEM_CONTENT_ENCODED": "see [ITEM_TITLE]", "ITEM_TITLE": "T&C"}

        assert render_xml(template, mapping) == "see [ITEM_TITLE] T&amp;C"

    def test_categories_expand_with_line_indent(self) -> None:
        template = "<item>\n      [ITEM_CATEGORIES]\n</item>"
        result = render_xml(template, {"ITEM_CATEGORIES": ["Technology", "Travel"]})

        assert result == (
            "<item>\n"
            "      <category>Technology</category>\n"
            "      <category>Travel</category>\n"
            "</item>"
        )

    def test_categories_from_string(self) -> None:
        result = render_xml("[ITEM_CATEGORIES]", {"ITEM_CATEGORIES": "News,\n Tech ,"})

        assert result == "<category>News</category>\n<category>Tech</category>"

    def test_empty_categories_clear_placeholder(self) -> None:
        assert render_xml("<x>[ITEM_CATEGORIES]</x>", {"ITEM_CATEGORIES": []}) == "<x></x>"

    def test_list_under_plain_key_is_left_untouched(self) -> None:
        assert render_xml("[TAGS]", {"TAGS": ["a"]}) == "[TAGS]"

    def test_rendering_is_deterministic(self) -> None:
        template = "<t>[A]</t><c>[ITEM_CATEGORIES]</c>"
        mapping = {"A": "x & y", "ITEM_CATEGORIES": ["b", "a"]}

        assert render_xml(template, mapping) == render_xml(template, dict(mapping))

    def test_render_dispatches_on_kind(self) -> None:
        assert render("[A]", {"A": "<"}, TemplateKind.XML) == "&lt;"


class TestRenderJson:
    """Tests for ``{{KEY}}`` templates."""

    def test_string_values_are_escaped_in_quotes(self) -> None:
        result = render_json('{"title": "{{ITEM_TITLE}}"}', {"ITEM_TITLE": 'The "Big" One'})

        assert json.loads(result) == {"title": 'The "Big" One'}

    def test_numbers_drop_surrounding_quotes(self) -> None:
        result = render_json('{"n": "{{N}}"}', {"N": 7})

        assert json.loads(result) == {"n": 7}

    def test_unquoted_placeholder_takes_literal(self) -> None:
        template = '{"chapters": {{ITEM_CHAPTERS}}, "ok": {{OK}}}'
        chapters = [{"startTime": 0, "title": "Intro"}]

        result = json.loads(render_json(template, {"ITEM_CHAPTERS": chapters, "OK": True}))

        assert result == {"chapters": chapters, "ok": True}

    def test_whitespace_inside_braces(self) -> None:
        result = render_json('{"t": "{{ ITEM_TITLE }}"}', {"ITEM_TITLE": "x"})

        assert json.loads(result) == {"t": "x"}

    def test_missing_value_inside_quotes_stays_visible(self) -> None:
        result = render_json('{"t": "{{ITEM_TITLE}}"}', {})

        assert json.loads(result) == {"t": "{{ITEM_TITLE}}"}

    def test_output_is_indented_with_trailing_newline(self) -> None:
        result = render_json('{"a":1,"b":"{{B}}"}', {"B": "x"})

        assert result == '{\n  "a": 1,\n  "b": "x"\n}\n'

    def test_invalid_json_raises(self) -> None:
        """Test that a missing unquoted placeholder makes the document invalid."""
        with pytest.raises(TemplateRenderError, match="invalid"):
            render_json('{"chapters": {{ITEM_CHAPTERS}}}', {})

    def test_render_dispatches_on_kind(self) -> None:
        result = render('{"a": "{{A}}"}', {"A": "<"}, TemplateKind.JSON)

        assert json.loads(result) == {"a": "<"}
