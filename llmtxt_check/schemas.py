"""
Pydantic schemas for the llm.txt checker.

This module is the single source of truth for every data model passed
between pipeline stages. All models are frozen: a stage never mutates the
output of another stage, it only returns new values.

Architecture:
- LineSpan / SourceLine / Heading / CodeBlock: positional building blocks
- Frontmatter / Section / Document: the parsed document tree
- SymbolEntry / Reference: extracted API surface and example references
- Diagnostic / Report: validation output
"""

from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# ENUMERATIONS
# ============================================================================

class Severity(str, Enum):
    """Diagnostic severity. Only ERROR affects the pass/fail outcome."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


class SectionKind(str, Enum):
    """Tag of the section variant."""
    FRONTMATTER = "frontmatter"
    CORE_CONCEPTS = "core_concepts"
    PITFALLS = "pitfalls"
    INDEX = "index"
    MODULE_SECTIONS = "module_sections"
    MODULE_SECTION = "module_section"
    GLOBAL_EXAMPLES = "global_examples"
    UNKNOWN = "unknown"


class SymbolKind(str, Enum):
    """Kind of a documented API object."""
    CLASS = "class"
    FUNCTION = "function"
    METHOD = "method"
    EXCEPTION = "exception"
    UNKNOWN = "unknown"


class DiagnosticCode:
    """Stable diagnostic codes. Every recognised anomaly maps to exactly one."""

    # Fatal parse failures
    MALFORMED_FRONTMATTER = "MalformedFrontmatter"
    UNTERMINATED_CODE_BLOCK = "UnterminatedCodeBlock"

    # Frontmatter
    MISSING_FRONTMATTER = "MissingFrontmatter"
    MISSING_FRONTMATTER_FIELD = "MissingFrontmatterField"
    INVALID_FRONTMATTER_FIELD = "InvalidFrontmatterField"
    UNEXPECTED_LANGUAGE = "UnexpectedLanguage"
    INVALID_VERSION = "InvalidVersion"
    EMPTY_SUMMARY = "EmptySummary"

    # Section schema
    MISSING_SECTION = "MissingSection"
    MISSING_RECOMMENDED_SECTION = "MissingRecommendedSection"
    SECTION_OUT_OF_ORDER = "SectionOutOfOrder"
    DUPLICATE_SECTION = "DuplicateSection"
    UNKNOWN_SECTION = "UnknownSection"
    EMPTY_SECTION = "EmptySection"
    MALFORMED_INDEX = "MalformedIndex"
    EMPTY_MODULE_SECTION = "EmptyModuleSection"
    INVALID_MODULE_NAME = "InvalidModuleName"
    MISSING_EXAMPLE_CODE = "MissingExampleCode"

    # Symbol tables
    UNRECOGNIZED_OBJECT_HEADER = "UnrecognizedObjectHeader"

    # Cross references
    UNDOCUMENTED_SYMBOL = "UndocumentedSymbol"
    UNLISTED_SYMBOL = "UnlistedSymbol"
    DUPLICATE_SYMBOL = "DuplicateSymbol"
    MODULE_MISMATCH = "ModuleMismatch"
    KIND_MISMATCH = "KindMismatch"

    # Example references
    UNKNOWN_SYMBOL_REFERENCE = "UnknownSymbolReference"


# Code -> (default severity, description), in pipeline order
DIAGNOSTIC_CATALOG: Dict[str, Tuple[str, str]] = {
    DiagnosticCode.MALFORMED_FRONTMATTER: ("error", "Frontmatter not closed by --- before the first heading (fatal)"),
    DiagnosticCode.UNTERMINATED_CODE_BLOCK: ("error", "Fenced code block still open at end of input (fatal)"),
    DiagnosticCode.MISSING_FRONTMATTER: ("error", "Document does not start with a '---' frontmatter block"),
    DiagnosticCode.MISSING_FRONTMATTER_FIELD: ("error", "One of package, version, language, summary is absent"),
    DiagnosticCode.INVALID_FRONTMATTER_FIELD: ("error", "Frontmatter is not a valid YAML mapping, a recognised key is not a string, or package is empty"),
    DiagnosticCode.UNEXPECTED_LANGUAGE: ("warning", "Frontmatter language is not an accepted ecosystem language"),
    DiagnosticCode.INVALID_VERSION: ("warning", "Version is not a dotted numeric sequence"),
    DiagnosticCode.EMPTY_SUMMARY: ("warning", "Frontmatter summary is blank"),
    DiagnosticCode.MISSING_SECTION: ("error", "Index or Module Sections missing"),
    DiagnosticCode.MISSING_RECOMMENDED_SECTION: ("info", "Core Concepts, Pitfalls or Global Examples missing"),
    DiagnosticCode.SECTION_OUT_OF_ORDER: ("warning", "Section appears out of canonical order (info when order is not strict)"),
    DiagnosticCode.DUPLICATE_SECTION: ("warning", "Section appears more than once (error for Index)"),
    DiagnosticCode.UNKNOWN_SECTION: ("info", "Heading outside the section vocabulary; content kept"),
    DiagnosticCode.EMPTY_SECTION: ("warning", "Core Concepts or Pitfalls has no content"),
    DiagnosticCode.MALFORMED_INDEX: ("error", "Index is not a two-level list of modules and labelled categories"),
    DiagnosticCode.EMPTY_MODULE_SECTION: ("error", "Module Section declares no level-4 object heading"),
    DiagnosticCode.INVALID_MODULE_NAME: ("error", "Module heading does not name a dotted module"),
    DiagnosticCode.MISSING_EXAMPLE_CODE: ("warning", "Global Examples has no fenced code block"),
    DiagnosticCode.UNRECOGNIZED_OBJECT_HEADER: ("warning", "Object heading outside the class/Function:/exception/method grammar"),
    DiagnosticCode.UNDOCUMENTED_SYMBOL: ("error", "Listed in the Index but missing from its Module Section"),
    DiagnosticCode.UNLISTED_SYMBOL: ("warning", "Documented in a Module Section but not listed in the Index"),
    DiagnosticCode.DUPLICATE_SYMBOL: ("error", "Same name and kind declared twice in one module"),
    DiagnosticCode.MODULE_MISMATCH: ("error", "Module present in only one of Index and Module Sections"),
    DiagnosticCode.KIND_MISMATCH: ("warning", "Same name listed and documented with different kinds"),
    DiagnosticCode.UNKNOWN_SYMBOL_REFERENCE: ("warning", "Example code references an undocumented package name"),
}


# ============================================================================
# POSITIONAL SCHEMAS
# ============================================================================

class LineSpan(BaseModel):
    """Inclusive, 1-indexed line range with the byte offset of its first line."""
    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=1, description="First line (1-indexed)")
    end: int = Field(ge=1, description="Last line, inclusive")
    offset: Optional[int] = Field(default=None, ge=0, description="UTF-8 byte offset of the first line, for section boundaries")

    @classmethod
    def line(cls, number: int, offset: Optional[int] = None) -> "LineSpan":
        return cls(start=number, end=number, offset=offset)

    def __str__(self) -> str:
        if self.start == self.end:
            return f"{self.start}"
        return f"{self.start}-{self.end}"


class SourceLine(BaseModel):
    """One physical line of a section body."""
    model_config = ConfigDict(frozen=True)

    number: int
    text: str
    in_code: bool = Field(
        default=False,
        description="True for fence markers and lines inside a fenced code block"
    )


class Heading(BaseModel):
    """ATX heading found outside fenced code."""
    model_config = ConfigDict(frozen=True)

    level: int = Field(ge=1, le=6)
    text: str
    line: int


class CodeBlock(BaseModel):
    """Fenced code block. `span` covers both fence lines."""
    model_config = ConfigDict(frozen=True)

    language: Optional[str] = Field(None, description="First word of the info string, lowercased")
    code: str
    span: LineSpan

    @property
    def first_code_line(self) -> int:
        return self.span.start + 1


# ============================================================================
# DOCUMENT TREE
# ============================================================================

class Frontmatter(BaseModel):
    """
    Metadata block delimited by `---` lines at the very top of the document.

    Recognised keys land in `entries` when their value is a string scalar,
    non-string values in `invalid`; unrecognised keys are kept in `extra`.
    """
    model_config = ConfigDict(frozen=True)

    entries: Dict[str, str] = Field(default_factory=dict, description="Recognised keys with string values")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Unrecognised keys, preserved")
    invalid: Dict[str, str] = Field(
        default_factory=dict,
        description="Recognised keys whose value is not a string scalar, mapped to the value's type name"
    )
    key_lines: Dict[str, int] = Field(default_factory=dict, description="Line of each top-level key")
    span: LineSpan
    error: Optional[str] = Field(
        None,
        description="Why the block is not a YAML mapping; keys were then recovered line by line"
    )
    error_line: Optional[int] = Field(None, description="Line the YAML error points at, if known")

    RECOGNIZED_KEYS: ClassVar[Tuple[str, ...]] = ("package", "version", "language", "summary")

    def get(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def span_for(self, key: str) -> LineSpan:
        line = self.key_lines.get(key)
        if line is None:
            return self.span
        return LineSpan.line(line)


class Section(BaseModel):
    """
    One top-level section of the document.

    `lines` holds the body (everything after the heading line) with a flag
    for fenced content, `headings` the nested ATX headings outside fences,
    and `code_blocks` every fenced block in order.
    """
    model_config = ConfigDict(frozen=True)

    kind: SectionKind
    title: str
    level: int = Field(ge=1, le=6)
    module_name: Optional[str] = Field(None, description="Set for MODULE_SECTION")
    span: LineSpan
    body: str = ""
    lines: List[SourceLine] = Field(default_factory=list)
    headings: List[Heading] = Field(default_factory=list)
    code_blocks: List[CodeBlock] = Field(default_factory=list)

    @property
    def heading_line(self) -> int:
        return self.span.start

    def prose_lines(self) -> List[SourceLine]:
        """Body lines outside fenced code."""
        return [line for line in self.lines if not line.in_code]

    def has_content(self) -> bool:
        return any(line.text.strip() for line in self.lines)


class Document(BaseModel):
    """Root of the parsed tree for one input buffer."""
    model_config = ConfigDict(frozen=True)

    frontmatter: Optional[Frontmatter] = None
    title: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)
    diagnostics: List["Diagnostic"] = Field(
        default_factory=list,
        description="Diagnostics produced while parsing (fatal ones only)"
    )
    line_count: int = 0

    def sections_of(self, kind: SectionKind) -> List[Section]:
        return [section for section in self.sections if section.kind == kind]

    def first(self, kind: SectionKind) -> Optional[Section]:
        for section in self.sections:
            if section.kind == kind:
                return section
        return None

    @property
    def module_sections(self) -> List[Section]:
        return self.sections_of(SectionKind.MODULE_SECTION)

    @property
    def package(self) -> Optional[str]:
        if self.frontmatter is None:
            return None
        return self.frontmatter.get("package")

    @property
    def language(self) -> Optional[str]:
        if self.frontmatter is None:
            return None
        return self.frontmatter.get("language")


# ============================================================================
# SYMBOLS AND REFERENCES
# ============================================================================

class SymbolEntry(BaseModel):
    """A class, function, method or exception declared by the document."""
    model_config = ConfigDict(frozen=True)

    module: str = Field(description="Module name, e.g. 'geopy.geocoders'")
    kind: SymbolKind
    name: str = Field(description="Symbol name within the module, e.g. 'GoogleV3.reverse'")
    signature_text: Optional[str] = Field(None, description="Raw signature text if given")
    span: LineSpan

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"


class Reference(BaseModel):
    """Dotted identifier occurrence inside a fenced code block."""
    model_config = ConfigDict(frozen=True)

    text: str
    span: LineSpan
    containing_section: SectionKind


# ============================================================================
# OUTPUT SCHEMAS
# ============================================================================

class Diagnostic(BaseModel):
    """One reported defect."""
    model_config = ConfigDict(frozen=True)

    severity: Severity
    code: str = Field(description="Stable code, e.g. 'UndocumentedSymbol'")
    message: str
    span: LineSpan
    section: Optional[SectionKind] = Field(None, description="Section the diagnostic concerns")
    symbol: Optional[str] = Field(None, description="Qualified symbol name if applicable")

    def sort_key(self):
        return (self.span.start, self.severity.rank, self.code)

    @classmethod
    def error(cls, code: str, message: str, span: LineSpan, **kwargs) -> "Diagnostic":
        return cls(severity=Severity.ERROR, code=code, message=message, span=span, **kwargs)

    @classmethod
    def warning(cls, code: str, message: str, span: LineSpan, **kwargs) -> "Diagnostic":
        return cls(severity=Severity.WARNING, code=code, message=message, span=span, **kwargs)

    @classmethod
    def info(cls, code: str, message: str, span: LineSpan, **kwargs) -> "Diagnostic":
        return cls(severity=Severity.INFO, code=code, message=message, span=span, **kwargs)


class Report(BaseModel):
    """
    Result of validating one document.

    `ok` is true iff no ERROR diagnostic exists. `fatal` marks a report that
    stopped after a structural parse failure.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "source": "docs/llm.txt",
                "ok": False,
                "fatal": False,
                "diagnostics": [
                    {
                        "severity": "error",
                        "code": "UndocumentedSymbol",
                        "message": "'GoogleV3.reverse' is listed in the Index under "
                                   "'geopy.geocoders' but has no Module Section entry",
                        "span": {"start": 24, "end": 24, "offset": None},
                        "section": "index",
                        "symbol": "geopy.geocoders.GoogleV3.reverse"
                    }
                ]
            }
        }
    )

    source: Optional[str] = Field(None, description="Label of the validated input (usually a path)")
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    ok: bool
    fatal: bool = False

    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    def count(self, severity: Severity) -> int:
        return sum(1 for d in self.diagnostics if d.severity == severity)

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.code == code]

    @property
    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(Severity.WARNING)

    @property
    def info_count(self) -> int:
        return self.count(Severity.INFO)


Document.model_rebuild()


class SymbolTable(BaseModel):
    """
    Mapping of module name to the symbols declared for it by one source.

    Behaves like a read-only `Dict[str, List[SymbolEntry]]`; `module_spans`
    records where each module was introduced so module-level diagnostics
    can cite a line even when the module declares no symbols.
    """
    model_config = ConfigDict(frozen=True)

    source: str = Field(description="'index' or 'module_sections'")
    modules: Dict[str, List[SymbolEntry]] = Field(default_factory=dict)
    module_spans: Dict[str, LineSpan] = Field(default_factory=dict)

    def __getitem__(self, module: str) -> List[SymbolEntry]:
        return self.modules[module]

    def __contains__(self, module: object) -> bool:
        return module in self.modules

    def __len__(self) -> int:
        return len(self.modules)

    def get(self, module: str, default=None):
        return self.modules.get(module, default)

    def keys(self):
        return self.modules.keys()

    def items(self):
        return self.modules.items()

    def all_entries(self) -> List[SymbolEntry]:
        return [entry for entries in self.modules.values() for entry in entries]
