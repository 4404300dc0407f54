"""
Cross-reference resolver.

Diffs the Index table against the Module Section table, module by module,
and reports every disagreement:

- UndocumentedSymbol (error): listed in the Index, missing from the module's section
- UnlistedSymbol (warning): documented, but not discoverable through the Index
- DuplicateSymbol (error): same name and kind twice in one module of one table
- ModuleMismatch (error): module present in only one of the tables
- KindMismatch (warning): same name, different kind
"""

import logging
from typing import Dict, List

from llmtxt_check.schemas import (
    Diagnostic,
    DiagnosticCode,
    LineSpan,
    SectionKind,
    SymbolEntry,
    SymbolKind,
    SymbolTable,
)

logger = logging.getLogger(__name__)


TABLE_LABELS = {
    "index": "the Index",
    "module_sections": "the Module Sections",
}

TABLE_SECTIONS = {
    "index": SectionKind.INDEX,
    "module_sections": SectionKind.MODULE_SECTION,
}


def _first_by_name(entries: List[SymbolEntry]) -> Dict[str, SymbolEntry]:
    result: Dict[str, SymbolEntry] = {}
    for entry in entries:
        result.setdefault(entry.name, entry)
    return result


def _module_span(table: SymbolTable, module: str) -> LineSpan:
    span = table.module_spans.get(module)
    if span is not None:
        return span
    entries = table.get(module) or []
    if entries:
        return entries[0].span
    return LineSpan.line(1)


def find_duplicates(table: SymbolTable) -> List[Diagnostic]:
    """DuplicateSymbol for every repeated (module, kind, name) after its first occurrence."""
    diagnostics = []
    label = TABLE_LABELS.get(table.source, table.source)

    for module, entries in table.items():
        seen: Dict[tuple, SymbolEntry] = {}
        for entry in entries:
            key = (entry.kind, entry.name)
            first = seen.get(key)
            if first is None:
                seen[key] = entry
                continue
            diagnostics.append(Diagnostic.error(
                DiagnosticCode.DUPLICATE_SYMBOL,
                f"{entry.kind.value} '{entry.name}' appears more than once in module '{module}' "
                f"of {label} (first on line {first.span.start})",
                entry.span,
                section=TABLE_SECTIONS.get(table.source),
                symbol=entry.qualified_name,
            ))
    return diagnostics


def _kinds_conflict(left: SymbolKind, right: SymbolKind) -> bool:
    if SymbolKind.UNKNOWN in (left, right):
        return False
    return left != right


def _names(entries: List[SymbolEntry]) -> str:
    return ", ".join(f"'{name}'" for name in _first_by_name(entries))


class CrossReferenceResolver:
    """Compare the two symbol tables and produce cross-reference diagnostics."""

    def __init__(self, index_table: SymbolTable, module_table: SymbolTable):
        self.index_table = index_table
        self.module_table = module_table

    def resolve(self) -> List[Diagnostic]:
        diagnostics = []
        diagnostics.extend(find_duplicates(self.index_table))
        diagnostics.extend(find_duplicates(self.module_table))

        for module in self._modules():
            in_index = module in self.index_table
            in_sections = module in self.module_table

            if in_index and not in_sections:
                diagnostics.extend(self._index_only_module(module))
            elif in_sections and not in_index:
                diagnostics.extend(self._section_only_module(module))
            else:
                diagnostics.extend(self._compare_module(module))

        logger.debug(f"Cross-reference resolution produced {len(diagnostics)} diagnostics")
        return diagnostics

    def _modules(self) -> List[str]:
        """Index modules in Index order, then modules only found in the Module Sections."""
        modules = list(self.index_table.keys())
        modules.extend(module for module in self.module_table.keys() if module not in self.index_table)
        return modules

    def _index_only_module(self, module: str) -> List[Diagnostic]:
        span = _module_span(self.index_table, module)
        entries = self.index_table[module]
        diagnostics = [Diagnostic.error(
            DiagnosticCode.MODULE_MISMATCH,
            f"Module '{module}' is listed in the Index but has no '### Module: {module}' section",
            span,
            section=SectionKind.INDEX,
            symbol=module,
        )]
        if entries:
            diagnostics.append(Diagnostic.error(
                DiagnosticCode.UNDOCUMENTED_SYMBOL,
                f"Symbols listed for module '{module}' have no Module Section entries: {_names(entries)}",
                span,
                section=SectionKind.INDEX,
                symbol=module,
            ))
        return diagnostics

    def _section_only_module(self, module: str) -> List[Diagnostic]:
        span = _module_span(self.module_table, module)
        entries = self.module_table[module]
        diagnostics = [Diagnostic.error(
            DiagnosticCode.MODULE_MISMATCH,
            f"Module '{module}' has a Module Section but is not listed in the Index",
            span,
            section=SectionKind.MODULE_SECTION,
            symbol=module,
        )]
        if entries:
            diagnostics.append(Diagnostic.warning(
                DiagnosticCode.UNLISTED_SYMBOL,
                f"Symbols documented for module '{module}' are not listed in the Index: {_names(entries)}",
                span,
                section=SectionKind.MODULE_SECTION,
                symbol=module,
            ))
        return diagnostics

    def _compare_module(self, module: str) -> List[Diagnostic]:
        diagnostics = []
        listed = _first_by_name(self.index_table[module])
        documented = _first_by_name(self.module_table[module])

        for name, entry in listed.items():
            counterpart = documented.get(name)
            if counterpart is None:
                diagnostics.append(Diagnostic.error(
                    DiagnosticCode.UNDOCUMENTED_SYMBOL,
                    f"{entry.kind.value} '{name}' is listed in the Index under '{module}' "
                    f"but has no entry in its Module Section",
                    entry.span,
                    section=SectionKind.INDEX,
                    symbol=entry.qualified_name,
                ))
            elif _kinds_conflict(entry.kind, counterpart.kind):
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.KIND_MISMATCH,
                    f"'{name}' in '{module}' is listed as {entry.kind.value} in the Index but "
                    f"documented as {counterpart.kind.value} on line {counterpart.span.start}",
                    entry.span,
                    section=SectionKind.INDEX,
                    symbol=entry.qualified_name,
                ))

        for name, entry in documented.items():
            if name not in listed:
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.UNLISTED_SYMBOL,
                    f"{entry.kind.value} '{name}' is documented in module '{module}' "
                    f"but not listed in the Index",
                    entry.span,
                    section=SectionKind.MODULE_SECTION,
                    symbol=entry.qualified_name,
                ))

        return diagnostics


def resolve(index_table: SymbolTable, module_table: SymbolTable) -> List[Diagnostic]:
    """
    Diff the two symbol tables.

    Args:
        index_table: Table built from the Index
        module_table: Table built from the Module Sections

    Returns:
        Cross-reference diagnostics, unsorted
    """
    return CrossReferenceResolver(index_table, module_table).resolve()
