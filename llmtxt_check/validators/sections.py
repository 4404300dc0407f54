"""
Section schema validation.

Three families of checks over the ordered section list:

- presence: Index and at least one Module Section are required; Core
  Concepts, Pitfalls and Global Examples are recommended
- order: Frontmatter, Core Concepts, Pitfalls, Index, Module Sections,
  Global Examples (Unknown sections are exempt)
- shape: one validator per section kind, looked up by the section's tag

Shape violations are errors for Required sections and warnings for
Recommended / Highly Recommended ones.
"""

import logging
import re
from enum import Enum
from typing import Callable, Dict, List

from llmtxt_check.parser.outline import parse_index_outline
from llmtxt_check.schemas import (
    Diagnostic,
    DiagnosticCode,
    Document,
    LineSpan,
    Section,
    SectionKind,
    Severity,
)

logger = logging.getLogger(__name__)


class SectionStatus(str, Enum):
    REQUIRED = "required"
    HIGHLY_RECOMMENDED = "highly_recommended"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


SECTION_STATUS: Dict[SectionKind, SectionStatus] = {
    SectionKind.FRONTMATTER: SectionStatus.REQUIRED,
    SectionKind.CORE_CONCEPTS: SectionStatus.HIGHLY_RECOMMENDED,
    SectionKind.PITFALLS: SectionStatus.RECOMMENDED,
    SectionKind.INDEX: SectionStatus.REQUIRED,
    SectionKind.MODULE_SECTIONS: SectionStatus.REQUIRED,
    SectionKind.MODULE_SECTION: SectionStatus.REQUIRED,
    SectionKind.GLOBAL_EXAMPLES: SectionStatus.HIGHLY_RECOMMENDED,
    SectionKind.UNKNOWN: SectionStatus.OPTIONAL,
}

# Canonical relative order; MODULE_SECTIONS and MODULE_SECTION share a slot
SECTION_RANK: Dict[SectionKind, int] = {
    SectionKind.FRONTMATTER: 0,
    SectionKind.CORE_CONCEPTS: 1,
    SectionKind.PITFALLS: 2,
    SectionKind.INDEX: 3,
    SectionKind.MODULE_SECTIONS: 4,
    SectionKind.MODULE_SECTION: 4,
    SectionKind.GLOBAL_EXAMPLES: 5,
}

SECTION_LABELS: Dict[SectionKind, str] = {
    SectionKind.FRONTMATTER: "Frontmatter",
    SectionKind.CORE_CONCEPTS: "Core Concepts",
    SectionKind.PITFALLS: "Pitfalls",
    SectionKind.INDEX: "Index",
    SectionKind.MODULE_SECTIONS: "Module Sections",
    SectionKind.MODULE_SECTION: "Module Section",
    SectionKind.GLOBAL_EXAMPLES: "Global Examples",
    SectionKind.UNKNOWN: "Unknown",
}

RECOMMENDED_KINDS = (
    SectionKind.CORE_CONCEPTS,
    SectionKind.PITFALLS,
    SectionKind.GLOBAL_EXAMPLES,
)

# Kinds that should appear at most once
SINGLETON_KINDS = (
    SectionKind.CORE_CONCEPTS,
    SectionKind.PITFALLS,
    SectionKind.INDEX,
    SectionKind.MODULE_SECTIONS,
    SectionKind.GLOBAL_EXAMPLES,
)

MODULE_NAME = re.compile(r'^[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*$')

OBJECT_HEADING_LEVEL = 4


def shape_severity(kind: SectionKind) -> Severity:
    if SECTION_STATUS.get(kind) == SectionStatus.REQUIRED:
        return Severity.ERROR
    return Severity.WARNING


def _diagnostic(severity: Severity, code: str, message: str, span: LineSpan, section: SectionKind) -> Diagnostic:
    return Diagnostic(severity=severity, code=code, message=message, span=span, section=section)


def _heading_span(section: Section) -> LineSpan:
    return LineSpan.line(section.span.start, section.span.offset)


# ============================================================================
# PER-KIND SHAPE VALIDATORS
# ============================================================================

def validate_index_shape(section: Section) -> List[Diagnostic]:
    """Index must be a two-level list of formatted modules and labelled categories."""
    outline = parse_index_outline(section)
    severity = shape_severity(section.kind)
    return [
        _diagnostic(severity, DiagnosticCode.MALFORMED_INDEX, problem.message, LineSpan.line(problem.line), section.kind)
        for problem in outline.problems
    ]


def validate_module_section_shape(section: Section) -> List[Diagnostic]:
    diagnostics = []
    severity = shape_severity(section.kind)
    name = section.module_name or ""

    if not name:
        diagnostics.append(_diagnostic(
            severity,
            DiagnosticCode.INVALID_MODULE_NAME,
            f"Module Section heading '{section.title}' does not name a module",
            _heading_span(section),
            section.kind,
        ))
    elif not MODULE_NAME.match(name):
        diagnostics.append(_diagnostic(
            severity,
            DiagnosticCode.INVALID_MODULE_NAME,
            f"'{name}' is not a dotted module name",
            _heading_span(section),
            section.kind,
        ))

    if not any(heading.level == OBJECT_HEADING_LEVEL for heading in section.headings):
        diagnostics.append(_diagnostic(
            severity,
            DiagnosticCode.EMPTY_MODULE_SECTION,
            f"Module Section '{name or section.title}' declares no objects "
            f"(expected '#### class ...', '#### Function: ...' or '#### exception ...' headings)",
            section.span,
            section.kind,
        ))
    return diagnostics


def validate_global_examples_shape(section: Section) -> List[Diagnostic]:
    if section.code_blocks:
        return []
    return [_diagnostic(
        shape_severity(section.kind),
        DiagnosticCode.MISSING_EXAMPLE_CODE,
        f"'{section.title}' contains no fenced code block",
        section.span,
        section.kind,
    )]


def validate_prose_shape(section: Section) -> List[Diagnostic]:
    if section.has_content():
        return []
    return [_diagnostic(
        shape_severity(section.kind),
        DiagnosticCode.EMPTY_SECTION,
        f"'{section.title}' section is empty",
        section.span,
        section.kind,
    )]


def validate_unknown_section(section: Section) -> List[Diagnostic]:
    return [Diagnostic.info(
        DiagnosticCode.UNKNOWN_SECTION,
        f"Section '{section.title}' is not part of the llm.txt vocabulary; its content is kept but not validated",
        _heading_span(section),
        section=section.kind,
    )]


SHAPE_VALIDATORS: Dict[SectionKind, Callable[[Section], List[Diagnostic]]] = {
    SectionKind.INDEX: validate_index_shape,
    SectionKind.MODULE_SECTION: validate_module_section_shape,
    SectionKind.GLOBAL_EXAMPLES: validate_global_examples_shape,
    SectionKind.CORE_CONCEPTS: validate_prose_shape,
    SectionKind.PITFALLS: validate_prose_shape,
    SectionKind.UNKNOWN: validate_unknown_section,
}


# ============================================================================
# DOCUMENT-LEVEL CHECKS
# ============================================================================

class SectionSchemaValidator:
    """Check section presence, order and shape for one document."""

    def __init__(self, strict_order: bool = True):
        self.strict_order = strict_order

    def validate(self, document: Document) -> List[Diagnostic]:
        diagnostics = []
        diagnostics.extend(self.check_presence(document))
        diagnostics.extend(self.check_order(document.sections))
        diagnostics.extend(self.check_duplicates(document.sections))

        for section in document.sections:
            validator = SHAPE_VALIDATORS.get(section.kind)
            if validator is not None:
                diagnostics.extend(validator(section))

        logger.debug(f"Section validation produced {len(diagnostics)} diagnostics")
        return diagnostics

    def check_presence(self, document: Document) -> List[Diagnostic]:
        diagnostics = []
        span = LineSpan.line(1, 0)

        if document.first(SectionKind.INDEX) is None:
            diagnostics.append(Diagnostic.error(
                DiagnosticCode.MISSING_SECTION,
                "Required section 'Index' is missing",
                span,
                section=SectionKind.INDEX,
            ))
        if not document.module_sections:
            diagnostics.append(Diagnostic.error(
                DiagnosticCode.MISSING_SECTION,
                "Required section 'Module Sections' is missing (no '### Module: <name>' section found)",
                span,
                section=SectionKind.MODULE_SECTION,
            ))

        for kind in RECOMMENDED_KINDS:
            if document.first(kind) is None:
                diagnostics.append(Diagnostic.info(
                    DiagnosticCode.MISSING_RECOMMENDED_SECTION,
                    f"{SECTION_STATUS[kind].value.replace('_', ' ').capitalize()} section "
                    f"'{SECTION_LABELS[kind]}' is missing",
                    span,
                    section=kind,
                ))
        return diagnostics

    def check_order(self, sections: List[Section]) -> List[Diagnostic]:
        """Flag every section whose canonical rank is below one already seen."""
        diagnostics = []
        highest = None

        for section in sections:
            rank = SECTION_RANK.get(section.kind)
            if rank is None:
                continue
            if highest is not None and rank < SECTION_RANK[highest.kind]:
                message = (
                    f"Section '{SECTION_LABELS[section.kind]}' should come before "
                    f"'{SECTION_LABELS[highest.kind]}' (line {highest.span.start})"
                )
                if self.strict_order:
                    diagnostics.append(Diagnostic.warning(
                        DiagnosticCode.SECTION_OUT_OF_ORDER, message, _heading_span(section), section=section.kind
                    ))
                else:
                    diagnostics.append(Diagnostic.info(
                        DiagnosticCode.SECTION_OUT_OF_ORDER, message, _heading_span(section), section=section.kind
                    ))
                continue
            if highest is None or rank > SECTION_RANK[highest.kind]:
                highest = section
        return diagnostics

    def check_duplicates(self, sections: List[Section]) -> List[Diagnostic]:
        diagnostics = []
        first_seen: Dict[object, Section] = {}

        for section in sections:
            if section.kind in SINGLETON_KINDS:
                key = section.kind
                label = SECTION_LABELS[section.kind]
            elif section.kind == SectionKind.MODULE_SECTION and section.module_name:
                key = (section.kind, section.module_name)
                label = f"Module: {section.module_name}"
            else:
                continue

            first = first_seen.get(key)
            if first is None:
                first_seen[key] = section
                continue

            severity = Severity.ERROR if section.kind == SectionKind.INDEX else Severity.WARNING
            diagnostics.append(_diagnostic(
                severity,
                DiagnosticCode.DUPLICATE_SECTION,
                f"Section '{label}' appears again (first on line {first.span.start})",
                _heading_span(section),
                section.kind,
            ))
        return diagnostics


def validate_sections(document: Document, strict_order: bool = True) -> List[Diagnostic]:
    """
    Validate section presence, order and per-kind shape.

    Args:
        document: Parsed document
        strict_order: If False, order violations are reported as info

    Returns:
        List of diagnostics
    """
    return SectionSchemaValidator(strict_order=strict_order).validate(document)
