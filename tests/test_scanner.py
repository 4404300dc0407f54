"""Tests for the document scanner."""

import pytest

from llmtxt_check.parser.scanner import DocumentScanner, normalize_title, parse
from llmtxt_check.schemas import DiagnosticCode, SectionKind


FRONTMATTER = "---\npackage: demo\nversion: 1.0\nlanguage: python\nsummary: Demo.\n---\n"


def kinds(document):
    return [section.kind for section in document.sections]


class TestScannerGeopy:
    """Parse the reference document."""

    def test_section_order(self, geopy_document):
        assert kinds(geopy_document) == [
            SectionKind.FRONTMATTER,
            SectionKind.CORE_CONCEPTS,
            SectionKind.PITFALLS,
            SectionKind.INDEX,
            SectionKind.MODULE_SECTIONS,
            SectionKind.MODULE_SECTION,
            SectionKind.MODULE_SECTION,
            SectionKind.MODULE_SECTION,
            SectionKind.MODULE_SECTION,
            SectionKind.GLOBAL_EXAMPLES,
        ]

    def test_title(self, geopy_document):
        assert geopy_document.title == "geopy"

    def test_module_names(self, geopy_document):
        assert [s.module_name for s in geopy_document.module_sections] == [
            "geopy.geocoders",
            "geopy.location",
            "geopy.distance",
            "geopy.exc",
        ]

    def test_frontmatter_fields(self, geopy_document):
        frontmatter = geopy_document.frontmatter
        assert frontmatter.get("package") == "geopy"
        assert frontmatter.get("version") == "2.4.1"
        assert frontmatter.get("language") == "python"
        assert frontmatter.extra == {"homepage": "https://github.com/geopy/geopy"}
        assert frontmatter.key_lines["version"] == 3
        assert frontmatter.span.start == 1
        assert frontmatter.span.end == 7

    def test_section_offsets_point_at_headings(self, geopy_text, geopy_document):
        encoded = geopy_text.encode("utf-8")
        for section in geopy_document.sections[1:]:
            assert encoded[section.span.offset:].startswith(b"#")
        index = geopy_document.first(SectionKind.INDEX)
        assert encoded[index.span.offset:].startswith(b"## Index")

    def test_code_blocks_collected(self, geopy_document):
        examples = geopy_document.first(SectionKind.GLOBAL_EXAMPLES)
        assert len(examples.code_blocks) == 1
        assert examples.code_blocks[0].language == "python"
        assert "GeocoderTimedOut" in examples.code_blocks[0].code

    def test_parse_is_deterministic(self, geopy_text):
        first, _ = parse(geopy_text)
        second, _ = parse(geopy_text)
        assert first == second


class TestScannerStructure:
    """Section recognition rules."""

    def test_headings_inside_fences_are_not_structure(self):
        text = FRONTMATTER + "## Core Concepts\n\n```markdown\n## Index\n#### class Fake\n```\n"
        document, fatal = parse(text)
        assert fatal is None
        assert kinds(document) == [SectionKind.FRONTMATTER, SectionKind.CORE_CONCEPTS]
        core = document.sections[1]
        assert core.headings == []
        assert len(core.code_blocks) == 1
        assert core.code_blocks[0].code == "## Index\n#### class Fake"

    def test_unknown_section_keeps_content(self):
        text = FRONTMATTER + "## Changelog\n\n- 1.0: first release\n"
        document, _ = parse(text)
        unknown = document.sections[1]
        assert unknown.kind == SectionKind.UNKNOWN
        assert unknown.title == "Changelog"
        assert "first release" in unknown.body

    def test_titles_match_case_insensitively(self):
        text = FRONTMATTER + "## core concepts\n\ntext\n\n## API INDEX\n\n## Common Pitfalls:\n\ntext\n"
        document, _ = parse(text)
        assert kinds(document)[1:] == [SectionKind.CORE_CONCEPTS, SectionKind.INDEX, SectionKind.PITFALLS]

    def test_level_two_module_heading(self):
        document, _ = parse(FRONTMATTER + "## Module: `demo.core`\n\n#### class A\n")
        section = document.sections[1]
        assert section.kind == SectionKind.MODULE_SECTION
        assert section.module_name == "demo.core"

    def test_level_three_module_heading_needs_container(self):
        document, _ = parse(FRONTMATTER + "## Core Concepts\n\n### Module: demo.core\n")
        assert kinds(document) == [SectionKind.FRONTMATTER, SectionKind.CORE_CONCEPTS]
        assert document.sections[1].headings[0].text == "Module: demo.core"

    def test_level_three_module_headings_follow_each_other(self):
        text = FRONTMATTER + "## Module Sections\n\n### Module: a\n\n#### class A\n\n### Module: b\n\n#### class B\n"
        document, _ = parse(text)
        assert [s.module_name for s in document.module_sections] == ["a", "b"]

    def test_later_level_one_heading_is_unknown(self):
        document, _ = parse(FRONTMATTER + "# demo\n\n## Index\n\n# Appendix\n\ntext\n")
        assert document.title == "demo"
        assert kinds(document)[1:] == [SectionKind.INDEX, SectionKind.UNKNOWN]

    def test_span_ends_at_last_content_line(self):
        document, _ = parse(FRONTMATTER + "## Core Concepts\n\ntext\n\n\n")
        core = document.sections[1]
        assert core.span.start == 7
        assert core.span.end == 9

    def test_tilde_fence_and_longer_closing_rule(self):
        text = FRONTMATTER + "## Global Examples\n\n~~~~python\n```\n## Not a section\n~~~~\n"
        document, fatal = parse(text)
        assert fatal is None
        examples = document.sections[1]
        assert examples.code_blocks[0].code == "```\n## Not a section"

    def test_byte_order_mark_is_stripped(self):
        document, fatal = parse("\ufeff" + FRONTMATTER + "## Index\n")
        assert fatal is None
        assert document.frontmatter is not None

    def test_document_without_frontmatter(self):
        document, fatal = parse("# demo\n\n## Index\n")
        assert fatal is None
        assert document.frontmatter is None
        assert kinds(document) == [SectionKind.INDEX]

    def test_versions_stay_strings(self):
        document, _ = parse("---\nversion: 2.10\n---\n")
        assert document.frontmatter.get("version") == "2.10"

    def test_non_string_values_recorded_as_invalid(self):
        document, _ = parse("---\npackage: demo\nsummary:\n  - a\n  - b\n---\n")
        assert document.frontmatter.invalid == {"summary": "list"}
        assert "summary" not in document.frontmatter.entries

    def test_invalid_yaml_recovers_keys(self):
        document, fatal = parse("---\npackage: demo\nsummary: demo: a client\n---\n\n## Index\n")
        assert fatal is None
        frontmatter = document.frontmatter
        assert frontmatter.entries == {"package": "demo", "summary": "demo: a client"}
        assert "not valid YAML" in frontmatter.error
        assert frontmatter.error_line == 3
        assert [s.kind for s in document.sections] == [SectionKind.FRONTMATTER, SectionKind.INDEX]

    def test_frontmatter_not_a_mapping(self):
        document, fatal = parse("---\n- a\n- b\n---\n")
        assert fatal is None
        assert document.frontmatter.entries == {}
        assert "mapping" in document.frontmatter.error


class TestScannerFatal:
    """Structural failures abort parsing."""

    def test_frontmatter_not_closed_before_heading(self):
        document, fatal = parse("---\npackage: demo\n## Index\n")
        assert fatal.code == DiagnosticCode.MALFORMED_FRONTMATTER
        assert document.sections == []
        assert document.diagnostics == [fatal]

    def test_frontmatter_never_closed(self):
        _, fatal = parse("---\npackage: demo\n")
        assert fatal.code == DiagnosticCode.MALFORMED_FRONTMATTER

    def test_unterminated_code_block(self):
        text = FRONTMATTER + "## Global Examples\n\n```python\nprint('x')\n"
        document, fatal = parse(text)
        assert fatal.code == DiagnosticCode.UNTERMINATED_CODE_BLOCK
        assert fatal.span.start == 9
        assert document.diagnostics == [fatal]


class TestHelpers:

    @pytest.mark.parametrize("title,expected", [
        ("Core Concepts", "core concepts"),
        ("**Index**", "index"),
        ("Global   Examples:", "global examples"),
    ])
    def test_normalize_title(self, title, expected):
        assert normalize_title(title) == expected

    def test_scanner_offsets_are_utf8_bytes(self):
        scanner = DocumentScanner("é\nx\n")
        assert scanner.offset_of(2) == 3
