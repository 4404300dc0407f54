"""
llmtxt-check - conformance checker for llm.txt documents.

An llm.txt document describes a package's public API to a language model:
a YAML frontmatter block followed by Core Concepts, Pitfalls, Index,
Module Sections and Global Examples. This package checks that a document
is well-formed, complete and internally consistent.

Main Components:
- Parser: line-oriented scanner and Index outline parser
- Validators: frontmatter and section schema rules
- Symbols: Index / Module Section symbol tables and their cross-reference
- References: example code references to the documented API
- Reporting: merged, sorted diagnostics
- Pipeline: batch validation with a worker pool

Usage:
    from pathlib import Path
    from llmtxt_check import validate

    report = validate(Path("llm.txt").read_text(), source="llm.txt")
    if not report.ok:
        for diagnostic in report.diagnostics:
            print(diagnostic.span, diagnostic.code, diagnostic.message)
"""

__version__ = "0.1.0"

from .schemas import (
    # Output
    Diagnostic,
    DiagnosticCode,
    Report,
    Severity,

    # Document tree
    Document,
    Frontmatter,
    LineSpan,
    Section,
    SectionKind,

    # Symbols
    SymbolEntry,
    SymbolKind,
    SymbolTable,
)

from .config import CheckerConfig, ConfigError, load_config
from .parser import parse
from .validator import LLMTxtValidator, validate

__all__ = [
    # Entry points
    "validate",
    "parse",
    "LLMTxtValidator",

    # Configuration
    "CheckerConfig",
    "ConfigError",
    "load_config",

    # Output schemas
    "Diagnostic",
    "DiagnosticCode",
    "Report",
    "Severity",

    # Document schemas
    "Document",
    "Frontmatter",
    "LineSpan",
    "Section",
    "SectionKind",

    # Symbol schemas
    "SymbolEntry",
    "SymbolKind",
    "SymbolTable",
]
