"""
llm.txt validator - main orchestration logic.

Ties the pipeline stages together. This is the only entry point callers
need: `validate(text, config) -> Report`.
"""

import logging
from typing import Optional

from llmtxt_check.config import CheckerConfig
from llmtxt_check.parser.scanner import parse
from llmtxt_check.references.checker import check_references
from llmtxt_check.reporting.reporter import DiagnosticReporter
from llmtxt_check.schemas import Report
from llmtxt_check.symbols.builder import (
    build_index_table,
    build_module_table,
    unrecognized_header_diagnostics,
)
from llmtxt_check.symbols.resolver import resolve
from llmtxt_check.validators.frontmatter import validate_frontmatter
from llmtxt_check.validators.sections import validate_sections

logger = logging.getLogger(__name__)


class LLMTxtValidator:
    """
    Run the validation pipeline over one document.

    Pipeline:
    1. Parse text into a Document (fatal failures stop here)
    2. Validate frontmatter
    3. Validate section presence, order and shape
    4. Build the Index and Module Section symbol tables
    5. Cross-reference the two tables
    6. Check references in example code
    7. Merge and sort diagnostics into a Report
    """

    def __init__(self, config: Optional[CheckerConfig] = None):
        self.config = config or CheckerConfig()

    def validate(self, text: str, source: Optional[str] = None) -> Report:
        """
        Validate one llm.txt buffer.

        Args:
            text: Full document text
            source: Optional label (usually a path) copied into the Report

        Returns:
            Report with every diagnostic, sorted by line, severity and code
        """
        label = source or "<text>"

        logger.info(f"[1/7] Parsing {label}...")
        document, fatal = parse(text)
        if fatal is not None:
            logger.info(f"Fatal {fatal.code} at line {fatal.span}; skipping remaining stages")
            return DiagnosticReporter.fatal(fatal, source=source)
        logger.info(f"Parsed {len(document.sections)} sections")

        reporter = DiagnosticReporter(source)

        logger.info("[2/7] Validating frontmatter...")
        reporter.add(validate_frontmatter(document.frontmatter, self.config.accepted_languages))

        logger.info("[3/7] Validating sections...")
        reporter.add(validate_sections(document, strict_order=self.config.strict_order))

        logger.info("[4/7] Building symbol tables...")
        index_table = build_index_table(document)
        module_table = build_module_table(document)
        reporter.add(unrecognized_header_diagnostics(document))
        logger.info(
            f"Index lists {len(index_table.all_entries())} symbols in {len(index_table)} modules; "
            f"Module Sections document {len(module_table.all_entries())} symbols in {len(module_table)} modules"
        )

        logger.info("[5/7] Resolving cross-references...")
        reporter.add(resolve(index_table, module_table))

        logger.info("[6/7] Checking example references...")
        reporter.add(check_references(
            document,
            index_table,
            module_table,
            self.config.reference_allowlist,
        ))

        logger.info("[7/7] Building report...")
        report = reporter.build()
        logger.info(
            f"{label}: {report.error_count} errors, {report.warning_count} warnings, "
            f"{report.info_count} infos"
        )
        return report


def validate(text: str, config: Optional[CheckerConfig] = None, source: Optional[str] = None) -> Report:
    """
    Validate an llm.txt document.

    Args:
        text: Full document text
        config: Checker settings (defaults: python ecosystem, stdlib allow-list, strict order)
        source: Optional label copied into the Report

    Returns:
        Report; `report.ok` is False iff an error diagnostic exists

    Example:
        >>> report = validate(Path("llm.txt").read_text(), source="llm.txt")
        >>> report.ok
        True
    """
    return LLMTxtValidator(config).validate(text, source=source)
