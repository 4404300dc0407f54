"""Tests for the example reference checker."""

import pytest

from llmtxt_check.config import DEFAULT_REFERENCE_ALLOWLIST
from llmtxt_check.languages import LanguageRegistry
from llmtxt_check.parser.scanner import parse
from llmtxt_check.references.checker import (
    check_references,
    extract_references,
    import_name,
    sanitize,
)
from llmtxt_check.schemas import DiagnosticCode, SectionKind, Severity
from llmtxt_check.symbols.builder import build_index_table, build_module_table


HEADER = """\
---
package: demo-kit
version: 1.0
language: python
summary: Demo.
---

## Index

- **demo_kit.core**
  - Classes: `Widget`
  - Functions: `make_widget`

## Module Sections

### Module: demo_kit.core

#### class Widget(name)

#### Function: make_widget(name)

## Global Examples

"""


def example(code, tag="python"):
    return HEADER + f"```{tag}\n{code}\n```\n"


def check(text, allowlist=DEFAULT_REFERENCE_ALLOWLIST):
    document, fatal = parse(text)
    assert fatal is None
    return check_references(document, build_index_table(document), build_module_table(document), allowlist)


def reference_texts(text, allowlist=()):
    document, _ = parse(text)
    return [r.text for r in extract_references(document, allowlist)]


class TestExtraction:

    def test_geopy_references_resolve(self, geopy_document):
        diagnostics = check_references(
            geopy_document,
            build_index_table(geopy_document),
            build_module_table(geopy_document),
            DEFAULT_REFERENCE_ALLOWLIST,
        )
        assert diagnostics == []

    def test_geopy_alias_expansion(self, geopy_document):
        texts = [r.text for r in extract_references(geopy_document, DEFAULT_REFERENCE_ALLOWLIST)]
        assert "geopy.geocoders.get_geocoder_for_service" in texts
        assert "geopy.distance.geodesic" in texts

    def test_dotted_reference(self):
        assert reference_texts(example("w = demo_kit.core.Widget('a')")) == ["demo_kit.core.Widget"]

    def test_from_import_expansion(self):
        texts = reference_texts(example("from demo_kit.core import Widget as W, make_widget\nW('a')"))
        assert texts == ["demo_kit.core.Widget", "demo_kit.core.make_widget", "demo_kit.core.Widget"]

    def test_parenthesised_from_import(self):
        texts = reference_texts(example("from demo_kit.core import (\n    Widget,\n    make_widget,\n)"))
        assert texts == ["demo_kit.core.Widget", "demo_kit.core.make_widget"]

    def test_strings_and_comments_ignored(self):
        code = 'print("demo_kit.core.Missing")  # demo_kit.core.Gone\nx = """\ndemo_kit.Nope\n"""'
        assert reference_texts(example(code)) == []

    def test_attribute_chain_after_call_ignored(self):
        assert reference_texts(example("demo_kit.core.make_widget('a').size")) == ["demo_kit.core.make_widget"]

    def test_other_language_blocks_skipped(self):
        assert reference_texts(example("demo_kit.core.Missing()", tag="bash")) == []

    def test_untagged_blocks_skipped(self):
        assert reference_texts(example("demo_kit.core.Missing()", tag="")) == []

    def test_console_prompts(self):
        texts = reference_texts(example(">>> from demo_kit.core import Widget\n>>> Widget('a')", tag="pycon"))
        assert texts == ["demo_kit.core.Widget"] * 2

    def test_reference_line_and_section(self):
        text = example("x = 1\ndemo_kit.core.Widget('a')")
        document, _ = parse(text)
        reference = extract_references(document)[0]
        assert text.split("\n")[reference.span.start - 1] == "demo_kit.core.Widget('a')"
        assert reference.containing_section == SectionKind.GLOBAL_EXAMPLES

    def test_duplicates_on_one_line_collapsed(self):
        assert reference_texts(example("demo_kit.core.Widget(demo_kit.core.Widget)")) == ["demo_kit.core.Widget"]


class TestResolution:

    def test_unknown_symbol_is_warning(self):
        diagnostics = check(example("demo_kit.core.Gadget()"))
        assert [d.code for d in diagnostics] == [DiagnosticCode.UNKNOWN_SYMBOL_REFERENCE]
        assert diagnostics[0].severity == Severity.WARNING
        assert diagnostics[0].symbol == "demo_kit.core.Gadget"

    def test_unknown_module(self):
        assert [d.symbol for d in check(example("import demo_kit.extras"))] == ["demo_kit.extras"]

    def test_package_and_module_resolve(self):
        assert check(example("import demo_kit\nimport demo_kit.core")) == []

    def test_reexport_from_package_root(self):
        assert check(example("from demo_kit import Widget\nWidget('a')")) == []

    def test_symbol_from_another_module(self, geopy_text):
        text = geopy_text.replace(
            "print(geodesic(",
            "import geopy.exc\nx = geopy.exc.Nominatim\ny = geopy.location.GoogleV3\nprint(geodesic(",
        )
        assert [d.symbol for d in check(text)] == ["geopy.exc.Nominatim", "geopy.location.GoogleV3"]

    def test_reexport_through_undocumented_parent(self):
        text = example("demo_kit.core.make_widget('a')\ndemo_kit.core.Widget('a')\ndemo_kit.make_widget('a')")
        assert check(text) == []

    def test_member_access_on_symbol(self):
        assert check(example("demo_kit.core.Widget.from_name('a')")) == []

    def test_allowlisted_prefix_skipped(self):
        code = "demo_kit.compat.shim()"
        assert len(check(example(code))) == 1
        assert check(example(code), DEFAULT_REFERENCE_ALLOWLIST | {"demo_kit.compat"}) == []

    def test_import_alias_shadows_allowlist(self):
        diagnostics = check(example("import demo_kit.core as json\njson.Gadget()"))
        assert [d.symbol for d in diagnostics] == ["demo_kit.core.Gadget"]

    def test_package_name_never_allowlisted(self):
        diagnostics = check(example("demo_kit.core.Gadget()"), {"demo_kit"})
        assert len(diagnostics) == 1

    def test_unrelated_code_ignored(self):
        assert check(example("import os\nos.path.join('a', 'b')\nnumpy.array([1])")) == []

    def test_no_documented_modules(self):
        document, _ = parse("---\npackage: demo\n---\n\n```python\ndemo.Thing()\n```\n")
        assert check_references(document, build_index_table(document), build_module_table(document), ()) == []


class TestHelpers:

    def test_import_name(self):
        assert import_name("Demo-Kit") == "demo_kit"

    def test_sanitize_keeps_lines(self):
        code = "a = 'x'  # c\nb = /* no */ 2"
        assert sanitize(code, "python").count("\n") == 1
        assert "x" not in sanitize(code, "python")
        assert "no" not in sanitize("b = /* no */ 2", "javascript")

    @pytest.mark.parametrize("tag,expected", [
        ("py", "python"), ("Python3", "python"), ("ts", "typescript"), ("weird", "weird"), ("", None),
    ])
    def test_canonical_language(self, tag, expected):
        assert LanguageRegistry.canonical(tag) == expected
