"""Tests for the Index outline parser."""

import pytest

from llmtxt_check.parser.outline import parse_index_outline
from llmtxt_check.parser.scanner import parse
from llmtxt_check.schemas import SectionKind, SymbolKind


def index_outline(body):
    document, fatal = parse("## Index\n\n" + body)
    assert fatal is None
    return parse_index_outline(document.first(SectionKind.INDEX))


class TestOutlineModules:
    """Module bullets and their categories."""

    def test_geopy_index(self, geopy_document):
        outline = parse_index_outline(geopy_document.first(SectionKind.INDEX))
        assert outline.problems == []
        assert [m.name for m in outline.modules] == [
            "geopy.geocoders", "geopy.location", "geopy.distance", "geopy.exc",
        ]
        geocoders = outline.modules[0]
        assert [c.kind for c in geocoders.categories] == [
            SymbolKind.CLASS, SymbolKind.METHOD, SymbolKind.FUNCTION,
        ]
        function = geocoders.categories[2].tokens[0]
        assert function.name == "get_geocoder_for_service"
        assert function.signature == "(service)"

    @pytest.mark.parametrize("bullet", [
        "- **demo.core**",
        "- `demo.core`",
        "- **`demo.core`**",
        "- __demo.core__",
        "- [`demo.core`](#module-democore)",
        "* **demo.core** - core objects",
    ])
    def test_formatted_module_names(self, bullet):
        outline = index_outline(bullet + "\n  - Classes: `Widget`\n")
        assert outline.problems == []
        assert outline.modules[0].name == "demo.core"
        assert outline.modules[0].formatted is True

    def test_intro_prose_is_allowed(self):
        outline = index_outline("Public API by module.\n\n- **demo**\n  - Functions: `run`\n")
        assert outline.problems == []

    def test_continuation_line_extends_category(self):
        outline = index_outline("- **demo**\n  - Classes: `A`,\n    `B`\n")
        assert outline.problems == []
        assert [t.name for t in outline.modules[0].categories[0].tokens] == ["A", "B"]

    def test_empty_marker(self):
        outline = index_outline("- **demo**\n  - Classes: `A`\n  - Exceptions: none\n")
        assert outline.problems == []
        assert outline.modules[0].categories[1].tokens == []


class TestOutlineProblems:
    """Shapes reported as malformed."""

    def test_unformatted_module(self):
        outline = index_outline("- demo.core\n  - Classes: `Widget`\n")
        assert len(outline.problems) == 1
        assert "must be bold" in outline.problems[0].message
        assert outline.modules[0].name == "demo.core"

    def test_uncoded_token(self):
        outline = index_outline("- **demo**\n  - Classes: `A`, B\n")
        assert len(outline.problems) == 1
        assert "'B'" in outline.problems[0].message
        assert outline.problems[0].line == 4

    def test_unknown_category(self):
        outline = index_outline("- **demo**\n  - Constants: `PI`\n")
        messages = [p.message for p in outline.problems]
        assert any("Unknown Index category 'Constants'" in m for m in messages)

    def test_module_without_categories(self):
        outline = index_outline("- **demo**\n")
        assert len(outline.problems) == 1
        assert "no Classes/Functions/Exceptions" in outline.problems[0].message

    def test_too_deep(self):
        outline = index_outline("- **demo**\n  - Classes: `A`\n    - nested: `x`\n")
        assert any("deeper than two levels" in p.message for p in outline.problems)

    def test_text_after_list(self):
        outline = index_outline("- **demo**\n  - Classes: `A`\n\nTrailing prose.\n")
        assert any("Unexpected text" in p.message for p in outline.problems)

    def test_no_modules(self):
        outline = index_outline("Nothing here yet.\n")
        assert [p.message for p in outline.problems] == ["Index does not list any module"]

    def test_fenced_code_in_index(self):
        outline = index_outline("- **demo**\n  - Classes: `A`\n\n```\ncode\n```\n")
        assert any("Fenced code" in p.message for p in outline.problems)
