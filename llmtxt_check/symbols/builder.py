"""
Symbol table builder.

Two independent extraction passes over a parsed Document:

- `build_index_table`: what the Index promises (module bullets and their
  Classes / Functions / Exceptions / Methods tokens)
- `build_module_table`: what the Module Sections document (`### Module:`
  scopes and their level-4 object headings)

The tables are deliberately kept apart; their disagreement is what the
cross-reference resolver reports.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from llmtxt_check.parser.outline import parse_index_outline
from llmtxt_check.schemas import (
    Diagnostic,
    DiagnosticCode,
    Document,
    Heading,
    LineSpan,
    SectionKind,
    SymbolEntry,
    SymbolKind,
    SymbolTable,
)

logger = logging.getLogger(__name__)


OBJECT_HEADER = re.compile(
    r'^(?P<prefix>class\s+|exception\s+|function\s*:\s*|function\s+|method\s*:\s*|method\s+)'
    r'(?P<name>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)'
    r'\s*(?P<signature>\(.*)?$',
    re.IGNORECASE
)

# Fallback name for headings outside the grammar: the callable-looking identifier, if any
FALLBACK_NAME = re.compile(r'(?P<name>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)\s*\(')

PREFIX_KINDS = {
    'class': SymbolKind.CLASS,
    'exception': SymbolKind.EXCEPTION,
    'function': SymbolKind.FUNCTION,
    'method': SymbolKind.METHOD,
}

OBJECT_LEVEL = 4
MEMBER_LEVEL = 5


@dataclass
class ObjectHeader:
    kind: SymbolKind
    name: str
    signature_text: Optional[str]


def parse_object_header(text: str) -> Optional[ObjectHeader]:
    """
    Parse a Module Section object heading.

    Recognises `class Name(sig)`, `Function: name(sig)`, `exception Name(Base)`
    and `method Name.attr(sig)`; wrapping backticks are ignored.

    Returns:
        ObjectHeader, or None if the heading does not follow the grammar
    """
    cleaned = text.replace('`', '').strip()
    match = OBJECT_HEADER.match(cleaned)
    if not match:
        return None

    prefix = match.group('prefix').strip().rstrip(':').strip().lower()
    signature = match.group('signature')
    return ObjectHeader(
        kind=PREFIX_KINDS[prefix],
        name=match.group('name'),
        signature_text=signature.strip() if signature else None,
    )


def fallback_name(text: str) -> str:
    cleaned = text.replace('`', '').strip()
    match = FALLBACK_NAME.search(cleaned)
    if match:
        return match.group('name')
    return cleaned


def build_index_table(document: Document) -> SymbolTable:
    """
    Build the symbol table promised by the first Index section.

    Args:
        document: Parsed document

    Returns:
        SymbolTable keyed by module name, entries in document order
    """
    modules: Dict[str, List[SymbolEntry]] = {}
    module_spans: Dict[str, LineSpan] = {}

    index = document.first(SectionKind.INDEX)
    if index is None:
        return SymbolTable(source="index")

    outline = parse_index_outline(index)
    for module in outline.modules:
        entries = modules.setdefault(module.name, [])
        module_spans.setdefault(module.name, LineSpan.line(module.line))
        for category in module.categories:
            for token in category.tokens:
                entries.append(SymbolEntry(
                    module=module.name,
                    kind=category.kind,
                    name=token.name,
                    signature_text=token.signature,
                    span=LineSpan.line(token.line),
                ))

    logger.debug(
        f"Index table: {len(modules)} modules, {sum(len(v) for v in modules.values())} symbols"
    )
    return SymbolTable(source="index", modules=modules, module_spans=module_spans)


def _walk_module_headings(headings: List[Heading], module: str):
    """
    Yield (heading, ObjectHeader or None, qualified name) for each object heading.

    Level-4 headings declare objects. Level-5 `method` headings under a class
    declare `Class.method`; other level-5 headings are prose sub-headings.
    """
    current_class: Optional[str] = None

    for heading in headings:
        if heading.level < OBJECT_LEVEL:
            current_class = None
            continue

        if heading.level == OBJECT_LEVEL:
            parsed = parse_object_header(heading.text)
            if parsed is None:
                current_class = None
                yield heading, None, fallback_name(heading.text)
                continue
            current_class = parsed.name if parsed.kind in (SymbolKind.CLASS, SymbolKind.EXCEPTION) else None
            yield heading, parsed, parsed.name
            continue

        if heading.level == MEMBER_LEVEL and current_class is not None:
            parsed = parse_object_header(heading.text)
            if parsed is not None and parsed.kind == SymbolKind.METHOD:
                name = parsed.name
                if not name.startswith(f"{current_class}."):
                    name = f"{current_class}.{name}"
                yield heading, parsed, name


def build_module_table(document: Document) -> SymbolTable:
    """
    Build the symbol table documented by the Module Sections.

    Headings that do not follow the object grammar are still recorded with
    kind UNKNOWN so that they take part in cross-referencing.
    """
    modules: Dict[str, List[SymbolEntry]] = {}
    module_spans: Dict[str, LineSpan] = {}

    for section in document.module_sections:
        module = section.module_name
        if not module:
            continue

        entries = modules.setdefault(module, [])
        module_spans.setdefault(module, LineSpan.line(section.span.start, section.span.offset))

        for heading, parsed, name in _walk_module_headings(section.headings, module):
            entries.append(SymbolEntry(
                module=module,
                kind=parsed.kind if parsed else SymbolKind.UNKNOWN,
                name=name,
                signature_text=parsed.signature_text if parsed else None,
                span=LineSpan.line(heading.line),
            ))

    logger.debug(
        f"Module table: {len(modules)} modules, {sum(len(v) for v in modules.values())} symbols"
    )
    return SymbolTable(source="module_sections", modules=modules, module_spans=module_spans)


def unrecognized_header_diagnostics(document: Document) -> List[Diagnostic]:
    """UnrecognizedObjectHeader warnings for level-4 headings outside the grammar."""
    diagnostics = []
    for section in document.module_sections:
        if not section.module_name:
            continue
        for heading, parsed, name in _walk_module_headings(section.headings, section.module_name):
            if parsed is None:
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.UNRECOGNIZED_OBJECT_HEADER,
                    f"Heading '{heading.text}' in module '{section.module_name}' does not match "
                    f"'class Name(...)', 'Function: name(...)', 'exception Name(Base)' or "
                    f"'method Class.name(...)'; recorded as '{name}' of unknown kind",
                    LineSpan.line(heading.line),
                    section=SectionKind.MODULE_SECTION,
                    symbol=f"{section.module_name}.{name}",
                ))
    return diagnostics
