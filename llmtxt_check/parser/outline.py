"""
Outline parser for the Index section.

The Index is a two-level nested Markdown list: module bullets whose bold or
code-formatted text names the module, each containing category sub-bullets
(`Classes:`, `Functions:`, `Exceptions:`, `Methods:`) with comma-separated,
code-formatted symbol tokens. The section validator reports the problems
collected here; the symbol table builder reads the modules.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from llmtxt_check.schemas import Section, SymbolKind

BULLET = re.compile(r'^(?P<indent>[ \t]*)[-*+][ \t]+(?P<content>.*?)\s*$')

IDENTIFIER_PATH = r'[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*'

# Formatted module bullets: **name**, __name__, `name`, **`name`**, [`name`](#anchor)
FORMATTED_MODULE_PATTERNS = [
    re.compile(r'^\*\*`?(?P<name>' + IDENTIFIER_PATH + r')`?\*\*(?P<rest>.*)$'),
    re.compile(r'^__`?(?P<name>' + IDENTIFIER_PATH + r')`?__(?P<rest>.*)$'),
    re.compile(r'^`(?P<name>' + IDENTIFIER_PATH + r')`(?P<rest>.*)$'),
    re.compile(r'^\[(?:\*\*)?`?(?P<name>' + IDENTIFIER_PATH + r')`?(?:\*\*)?\]\([^)]*\)(?P<rest>.*)$'),
]
PLAIN_MODULE = re.compile(r'^(?P<name>' + IDENTIFIER_PATH + r')(?P<rest>.*)$')

CATEGORY = re.compile(r'^[*_]*(?P<label>[A-Za-z][A-Za-z ]*?)[*_]*\s*:[*_]*\s*(?P<rest>.*)$')

CODE_TOKEN = re.compile(r'`([^`]+)`')

TOKEN_NAME = re.compile(r'^\s*(?P<name>' + IDENTIFIER_PATH + r')\s*(?P<signature>.*?)\s*$')

CATEGORY_KINDS = {
    'classes': SymbolKind.CLASS,
    'class': SymbolKind.CLASS,
    'functions': SymbolKind.FUNCTION,
    'function': SymbolKind.FUNCTION,
    'exceptions': SymbolKind.EXCEPTION,
    'exception': SymbolKind.EXCEPTION,
    'methods': SymbolKind.METHOD,
    'method': SymbolKind.METHOD,
}

# Placeholder values meaning "no symbols in this category"
EMPTY_MARKERS = {'none', 'n/a', '-', '—', '–'}


@dataclass
class IndexToken:
    name: str
    signature: Optional[str]
    line: int


@dataclass
class IndexCategory:
    label: str
    kind: SymbolKind
    line: int
    tokens: List[IndexToken] = field(default_factory=list)


@dataclass
class IndexModule:
    name: str
    line: int
    formatted: bool
    categories: List[IndexCategory] = field(default_factory=list)


@dataclass
class IndexProblem:
    line: int
    message: str


@dataclass
class IndexOutline:
    modules: List[IndexModule] = field(default_factory=list)
    problems: List[IndexProblem] = field(default_factory=list)


def _indent_width(indent: str) -> int:
    return len(indent.replace('\t', '    '))


def _parse_module_bullet(content: str) -> Tuple[Optional[str], bool]:
    for pattern in FORMATTED_MODULE_PATTERNS:
        match = pattern.match(content)
        if match:
            return match.group('name'), True
    match = PLAIN_MODULE.match(content)
    if match:
        return match.group('name'), False
    return None, False


def _parse_tokens(text: str, line: int, outline: IndexOutline) -> List[IndexToken]:
    """Extract code-formatted tokens from one category segment."""
    tokens = []
    for match in CODE_TOKEN.finditer(text):
        raw = match.group(1)
        token_match = TOKEN_NAME.match(raw)
        if not token_match:
            outline.problems.append(IndexProblem(line, f"'{raw}' is not a valid symbol name"))
            continue
        signature = token_match.group('signature') or None
        tokens.append(IndexToken(name=token_match.group('name'), signature=signature, line=line))

    leftover = CODE_TOKEN.sub('', text)
    leftover = re.sub(r'[,;\s]+', ' ', leftover).strip()
    if leftover and leftover.lower() not in EMPTY_MARKERS:
        outline.problems.append(IndexProblem(
            line,
            f"Symbols must be code-formatted (`Name`); found uncoded text '{leftover}'"
        ))
    return tokens


class IndexOutlineParser:
    """Walk the prose lines of an Index section and build its outline."""

    def __init__(self, section: Section):
        self.section = section
        self.outline = IndexOutline()
        self.base_indent: Optional[int] = None
        self.category_indent: Optional[int] = None
        self.module: Optional[IndexModule] = None
        self.category: Optional[IndexCategory] = None
        self.seen_bullet = False

    def parse(self) -> IndexOutline:
        reported_code = False
        for source_line in self.section.lines:
            if source_line.in_code:
                if not reported_code:
                    self.outline.problems.append(IndexProblem(
                        source_line.number,
                        "Fenced code is not allowed inside the Index list"
                    ))
                    reported_code = True
                continue
            reported_code = False
            if not source_line.text.strip():
                continue
            self._feed(source_line.number, source_line.text)

        for module in self.outline.modules:
            if not module.categories:
                self.outline.problems.append(IndexProblem(
                    module.line,
                    f"Module '{module.name}' has no Classes/Functions/Exceptions sub-bullets"
                ))
        if not self.outline.modules:
            self.outline.problems.append(IndexProblem(
                self.section.span.start,
                "Index does not list any module"
            ))
        return self.outline

    def _feed(self, number: int, text: str):
        bullet = BULLET.match(text)

        if bullet is None:
            indent = _indent_width(text[:len(text) - len(text.lstrip())])
            if not self.seen_bullet:
                # Introductory prose before the list
                return
            if self.base_indent is not None and indent > self.base_indent and self.category is not None:
                self._add_segment(number, text.strip())
                return
            if self.base_indent is not None and indent > self.base_indent:
                return
            self.outline.problems.append(IndexProblem(number, f"Unexpected text in Index list: '{text.strip()}'"))
            return

        self.seen_bullet = True
        indent = _indent_width(bullet.group('indent'))
        content = bullet.group('content')

        if self.base_indent is None:
            self.base_indent = indent

        if indent <= self.base_indent:
            self._start_module(number, content)
        else:
            self._start_category(number, indent, content)

    def _start_module(self, number: int, content: str):
        name, formatted = _parse_module_bullet(content)
        self.category = None
        self.category_indent = None
        if name is None:
            self.module = None
            self.outline.problems.append(IndexProblem(number, f"Module bullet has no module name: '{content}'"))
            return
        if not formatted:
            self.outline.problems.append(IndexProblem(
                number,
                f"Module name '{name}' must be bold (**{name}**) or code-formatted (`{name}`)"
            ))
        self.module = IndexModule(name=name, line=number, formatted=formatted)
        self.outline.modules.append(self.module)

    def _start_category(self, number: int, indent: int, content: str):
        if self.module is None:
            self.outline.problems.append(IndexProblem(number, "Category bullet is not nested under a module bullet"))
            return

        if self.category_indent is None:
            self.category_indent = indent
        elif indent > self.category_indent:
            self.outline.problems.append(IndexProblem(number, "Index list is nested deeper than two levels"))
            return

        match = CATEGORY.match(content)
        if not match:
            self.category = None
            self.outline.problems.append(IndexProblem(
                number,
                f"Category bullet must look like 'Classes: `Name`, ...', got '{content}'"
            ))
            return

        label = match.group('label').strip()
        kind = CATEGORY_KINDS.get(label.lower())
        if kind is None:
            self.category = None
            self.outline.problems.append(IndexProblem(
                number,
                f"Unknown Index category '{label}' (expected Classes, Functions, Exceptions or Methods)"
            ))
            return

        self.category = IndexCategory(label=label, kind=kind, line=number)
        self.module.categories.append(self.category)
        self._add_segment(number, match.group('rest'))

    def _add_segment(self, number: int, text: str):
        self.category.tokens.extend(_parse_tokens(text, number, self.outline))


def parse_index_outline(section: Section) -> IndexOutline:
    """Parse an Index section into modules, categories and tokens plus shape problems."""
    return IndexOutlineParser(section).parse()
