"""Shared fixtures for llmtxt-check tests."""

from pathlib import Path

import pytest

from llmtxt_check.config import CheckerConfig
from llmtxt_check.parser.scanner import parse

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def geopy_path():
    return FIXTURES / "geopy_llm.txt"


@pytest.fixture
def geopy_text(geopy_path):
    return geopy_path.read_text(encoding="utf-8")


@pytest.fixture
def geopy_document(geopy_text):
    document, fatal = parse(geopy_text)
    assert fatal is None
    return document


@pytest.fixture
def config():
    return CheckerConfig()


@pytest.fixture
def remove_lines():
    """Return a helper dropping every line that starts with one of the given prefixes."""
    def _remove(text, *prefixes):
        kept = [line for line in text.split("\n") if not any(line.startswith(p) for p in prefixes)]
        assert len(kept) < len(text.split("\n")), f"none of {prefixes} found"
        return "\n".join(kept)
    return _remove


@pytest.fixture
def line_of():
    """Return a helper giving the 1-indexed line of the first line starting with a prefix."""
    def _line_of(text, prefix):
        for number, line in enumerate(text.split("\n"), start=1):
            if line.startswith(prefix):
                return number
        raise AssertionError(f"'{prefix}' not found")
    return _line_of


MINIMAL_DOCUMENT = """\
---
package: demo
version: 1.0.0
language: python
summary: Demo package.
---

# demo

## Core Concepts

Demo concepts.

## Pitfalls

- None worth noting.

## Index

- **demo.core**
  - Classes: `Widget`
  - Functions: `make_widget`

## Module Sections

### Module: demo.core

#### class Widget(name)

A widget.

#### Function: make_widget(name)

Build a widget.

## Global Examples

```python
from demo.core import make_widget

widget = make_widget("a")
```
"""


@pytest.fixture
def minimal_text():
    return MINIMAL_DOCUMENT
