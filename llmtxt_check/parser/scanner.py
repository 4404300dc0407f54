"""
Line-oriented scanner for llm.txt documents.

Turns a raw text buffer into a `Document`: the frontmatter block followed by
the ordered list of top-level sections, each annotated with its line span
and byte offset.

States:
    AWAIT_FRONTMATTER_OPEN -> IN_FRONTMATTER -> BETWEEN_SECTIONS
    -> IN_SECTION_BODY <-> IN_FENCED_CODE -> DONE

Fenced code is tracked as its own state so that heading-like or list-like
text inside example code never becomes document structure.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import yaml

from llmtxt_check.schemas import (
    CodeBlock,
    Diagnostic,
    DiagnosticCode,
    Document,
    Frontmatter,
    Heading,
    LineSpan,
    Section,
    SectionKind,
    SourceLine,
)

logger = logging.getLogger(__name__)


class ScanState(Enum):
    AWAIT_FRONTMATTER_OPEN = "await_frontmatter_open"
    IN_FRONTMATTER = "in_frontmatter"
    BETWEEN_SECTIONS = "between_sections"
    IN_SECTION_BODY = "in_section_body"
    IN_FENCED_CODE = "in_fenced_code"
    DONE = "done"


# Known top-level section titles (normalized) -> section kind
SECTION_TITLES = {
    'core concepts': SectionKind.CORE_CONCEPTS,
    'pitfalls': SectionKind.PITFALLS,
    'common pitfalls': SectionKind.PITFALLS,
    'index': SectionKind.INDEX,
    'api index': SectionKind.INDEX,
    'module sections': SectionKind.MODULE_SECTIONS,
    'modules': SectionKind.MODULE_SECTIONS,
    'global examples': SectionKind.GLOBAL_EXAMPLES,
    'examples': SectionKind.GLOBAL_EXAMPLES,
}

FRONTMATTER_DELIMITER = re.compile(r'^---\s*$')

ATX_HEADING = re.compile(r'^ {0,3}(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$')

FENCE_OPEN = re.compile(r'^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^`]*?)[ \t]*$')

MODULE_HEADING = re.compile(r'^module\s*:\s*(?P<name>.*)$', re.IGNORECASE)

FRONTMATTER_KEY = re.compile(r'^(?P<key>[A-Za-z_][\w-]*)\s*:')


@dataclass
class _OpenFence:
    marker: str
    language: Optional[str]
    line: int
    code_lines: List[str] = field(default_factory=list)


@dataclass
class _SectionBuilder:
    """Mutable accumulator; frozen into a Section when the next one starts."""
    kind: SectionKind
    title: str
    level: int
    line: int
    offset: int
    module_name: Optional[str] = None
    lines: List[SourceLine] = field(default_factory=list)
    headings: List[Heading] = field(default_factory=list)
    code_blocks: List[CodeBlock] = field(default_factory=list)

    def build(self) -> Section:
        end = self.line
        for source_line in self.lines:
            if source_line.text.strip():
                end = source_line.number

        return Section(
            kind=self.kind,
            title=self.title,
            level=self.level,
            module_name=self.module_name,
            span=LineSpan(start=self.line, end=end, offset=self.offset),
            body='\n'.join(line.text for line in self.lines),
            lines=list(self.lines),
            headings=list(self.headings),
            code_blocks=list(self.code_blocks),
        )


class FatalParseError(Exception):
    """Structural failure that stops the pipeline."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic


def normalize_title(title: str) -> str:
    """Lowercase, unwrap emphasis/code markers, collapse whitespace, drop a trailing colon."""
    text = title.strip().strip('*_`').strip()
    text = re.sub(r'\s+', ' ', text)
    return text.rstrip(':').strip().lower()


def clean_module_name(raw: str) -> str:
    return raw.strip().strip('*_`').strip()


def match_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return (level, text) if the line is an ATX heading."""
    match = ATX_HEADING.match(line)
    if not match:
        return None
    return len(match.group(1)), match.group(2).strip()


def recover_frontmatter(body_lines: List[str]) -> Dict[str, str]:
    """
    Read `key: value` lines one by one when the block is not valid YAML.

    Only unindented keys are taken; the value is everything after the first
    colon, so `summary: geopy: a client` keeps its inner colon.
    """
    data: Dict[str, str] = {}
    for line in body_lines:
        match = FRONTMATTER_KEY.match(line)
        if match and match.group('key') not in data:
            data[match.group('key')] = line[match.end():].strip()
    return data


class DocumentScanner:
    """
    Parse one llm.txt buffer into a Document.

    Use `scan()` once per instance; the scanner keeps per-buffer state.
    """

    def __init__(self, text: str):
        if text.startswith('\ufeff'):
            text = text[1:]
        self.text = text
        self.raw_lines = text.splitlines()
        self.offsets = self._line_offsets(text)

        self.state = ScanState.AWAIT_FRONTMATTER_OPEN
        self.frontmatter: Optional[Frontmatter] = None
        self.title: Optional[str] = None
        self.sections: List[Section] = []
        self.current: Optional[_SectionBuilder] = None
        self.fence: Optional[_OpenFence] = None

    @staticmethod
    def _line_offsets(text: str) -> List[int]:
        offsets = []
        position = 0
        for line in text.splitlines(keepends=True):
            offsets.append(position)
            position += len(line.encode('utf-8'))
        return offsets

    def offset_of(self, number: int) -> int:
        if 1 <= number <= len(self.offsets):
            return self.offsets[number - 1]
        return len(self.text.encode('utf-8'))

    def scan(self) -> Tuple[Document, Optional[Diagnostic]]:
        """
        Run the state machine over every line.

        Returns:
            (Document, fatal diagnostic or None). When a fatal diagnostic is
            returned the Document contains only that diagnostic.
        """
        try:
            body_start = self._scan_frontmatter()
            self._scan_body(body_start)
        except FatalParseError as e:
            logger.debug(f"Fatal parse failure: {e.diagnostic.code} at line {e.diagnostic.span}")
            return Document(diagnostics=[e.diagnostic], line_count=len(self.raw_lines)), e.diagnostic

        self.state = ScanState.DONE
        document = Document(
            frontmatter=self.frontmatter,
            title=self.title,
            sections=self.sections,
            line_count=len(self.raw_lines),
        )
        logger.debug(
            f"Parsed {len(self.raw_lines)} lines into {len(self.sections)} sections"
        )
        return document, None

    # ------------------------------------------------------------------
    # Frontmatter
    # ------------------------------------------------------------------

    def _scan_frontmatter(self) -> int:
        """Consume the frontmatter block. Returns the index of the first body line."""
        if not self.raw_lines or not FRONTMATTER_DELIMITER.match(self.raw_lines[0]):
            self.state = ScanState.BETWEEN_SECTIONS
            return 0

        self.state = ScanState.IN_FRONTMATTER
        in_fence: Optional[str] = None

        for index in range(1, len(self.raw_lines)):
            line = self.raw_lines[index]
            number = index + 1

            fence_match = FENCE_OPEN.match(line)
            if in_fence:
                if fence_match and self._closes(fence_match.group('fence'), in_fence, fence_match.group('info')):
                    in_fence = None
                continue
            if fence_match:
                in_fence = fence_match.group('fence')
                continue

            if FRONTMATTER_DELIMITER.match(line):
                self.frontmatter = self._build_frontmatter(1, number)
                self.sections.append(Section(
                    kind=SectionKind.FRONTMATTER,
                    title='Frontmatter',
                    level=1,
                    span=LineSpan(start=1, end=number, offset=0),
                    body='\n'.join(self.raw_lines[1:index]),
                    lines=[
                        SourceLine(number=i + 1, text=self.raw_lines[i])
                        for i in range(1, index)
                    ],
                ))
                self.state = ScanState.BETWEEN_SECTIONS
                return index + 1

            if match_heading(line):
                raise FatalParseError(Diagnostic.error(
                    DiagnosticCode.MALFORMED_FRONTMATTER,
                    f"Frontmatter opened on line 1 is not closed by '---' before the heading on line {number}",
                    LineSpan(start=1, end=number, offset=0),
                    section=SectionKind.FRONTMATTER,
                ))

        raise FatalParseError(Diagnostic.error(
            DiagnosticCode.MALFORMED_FRONTMATTER,
            "Frontmatter opened on line 1 is never closed by '---'",
            LineSpan(start=1, end=max(len(self.raw_lines), 1), offset=0),
            section=SectionKind.FRONTMATTER,
        ))

    def _build_frontmatter(self, open_line: int, close_line: int) -> Frontmatter:
        body_lines = self.raw_lines[open_line:close_line - 1]
        span = LineSpan(start=open_line, end=close_line, offset=0)

        error: Optional[str] = None
        error_line: Optional[int] = None
        try:
            # BaseLoader keeps every scalar as a string ("2.10" stays "2.10")
            data = yaml.load('\n'.join(body_lines), Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            error = f"Frontmatter is not valid YAML: {getattr(e, 'problem', None) or e}"
            mark = getattr(e, 'problem_mark', None)
            if mark is not None:
                error_line = min(open_line + 1 + mark.line, max(close_line - 1, open_line))
            logger.debug(f"Frontmatter YAML error, recovering keys line by line: {e}")
            data = recover_frontmatter(body_lines)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            error = f"Frontmatter must be a mapping of keys to values, got {type(data).__name__}"
            data = {}

        key_lines: Dict[str, int] = {}
        for index, line in enumerate(body_lines):
            match = FRONTMATTER_KEY.match(line)
            if match and match.group('key') not in key_lines:
                key_lines[match.group('key')] = open_line + 1 + index

        entries: Dict[str, str] = {}
        invalid: Dict[str, str] = {}
        extra = {}
        for key, value in data.items():
            key = str(key)
            if key in Frontmatter.RECOGNIZED_KEYS:
                if isinstance(value, str):
                    entries[key] = value.strip()
                else:
                    invalid[key] = type(value).__name__
            else:
                extra[key] = value

        return Frontmatter(
            entries=entries,
            extra=extra,
            invalid=invalid,
            key_lines=key_lines,
            span=span,
            error=error,
            error_line=error_line,
        )

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    def _scan_body(self, start_index: int):
        for index in range(start_index, len(self.raw_lines)):
            self._feed(index + 1, self.raw_lines[index])

        if self.fence is not None:
            raise FatalParseError(Diagnostic.error(
                DiagnosticCode.UNTERMINATED_CODE_BLOCK,
                f"Fenced code block opened on line {self.fence.line} is never closed",
                LineSpan(
                    start=self.fence.line,
                    end=max(len(self.raw_lines), self.fence.line),
                    offset=self.offset_of(self.fence.line),
                ),
                section=self.current.kind if self.current else None,
            ))

        self._close_section()

    def _feed(self, number: int, line: str):
        if self.state == ScanState.IN_FENCED_CODE:
            self._feed_fenced(number, line)
            return

        fence_match = FENCE_OPEN.match(line)
        if fence_match:
            info = fence_match.group('info').strip()
            language = info.split()[0].lower() if info else None
            self.fence = _OpenFence(marker=fence_match.group('fence'), language=language, line=number)
            self.state = ScanState.IN_FENCED_CODE
            self._append(number, line, in_code=True)
            return

        heading = match_heading(line)
        if heading:
            level, text = heading
            kind, module_name = self._classify_heading(level, text)
            if kind is not None:
                self._open_section(kind, text, level, number, module_name)
                return
            if level == 1 and self.title is None and self.current is None:
                self.title = text
                return
            if self.current is not None:
                self.current.headings.append(Heading(level=level, text=text, line=number))

        self._append(number, line, in_code=False)

    def _feed_fenced(self, number: int, line: str):
        fence_match = FENCE_OPEN.match(line)
        self._append(number, line, in_code=True)

        if fence_match and self._closes(fence_match.group('fence'), self.fence.marker, fence_match.group('info')):
            block = CodeBlock(
                language=self.fence.language,
                code='\n'.join(self.fence.code_lines),
                span=LineSpan(start=self.fence.line, end=number, offset=self.offset_of(self.fence.line)),
            )
            if self.current is not None:
                self.current.code_blocks.append(block)
            self.fence = None
            self.state = ScanState.IN_SECTION_BODY if self.current else ScanState.BETWEEN_SECTIONS
            return

        self.fence.code_lines.append(line)

    @staticmethod
    def _closes(candidate: str, opener: str, info: str) -> bool:
        """A closing fence repeats the opening character at least as many times, with no info string."""
        return (
            candidate[0] == opener[0]
            and len(candidate) >= len(opener)
            and not info.strip()
        )

    def _classify_heading(self, level: int, text: str) -> Tuple[Optional[SectionKind], Optional[str]]:
        """
        Decide whether a heading starts a top-level section.

        Returns (kind, module_name), or (None, None) for headings that belong
        to the current section body.
        """
        module_match = MODULE_HEADING.match(text.strip().strip('*_'))

        if level == 2:
            if module_match:
                return SectionKind.MODULE_SECTION, clean_module_name(module_match.group('name'))
            return SECTION_TITLES.get(normalize_title(text), SectionKind.UNKNOWN), None

        if level == 3 and module_match and self.current is not None and self.current.kind in (
            SectionKind.MODULE_SECTIONS,
            SectionKind.MODULE_SECTION,
        ):
            return SectionKind.MODULE_SECTION, clean_module_name(module_match.group('name'))

        if level == 1 and (self.title is not None or self.current is not None):
            return SectionKind.UNKNOWN, None

        return None, None

    def _open_section(self, kind: SectionKind, title: str, level: int, number: int, module_name: Optional[str]):
        self._close_section()
        self.current = _SectionBuilder(
            kind=kind,
            title=title,
            level=level,
            line=number,
            offset=self.offset_of(number),
            module_name=module_name,
        )
        self.state = ScanState.IN_SECTION_BODY
        logger.debug(f"Line {number}: opened {kind.value} section '{title}'")

    def _close_section(self):
        if self.current is not None:
            self.sections.append(self.current.build())
            self.current = None

    def _append(self, number: int, line: str, in_code: bool):
        if self.current is not None:
            self.current.lines.append(SourceLine(number=number, text=line, in_code=in_code))


def parse(text: str) -> Tuple[Document, Optional[Diagnostic]]:
    """
    Parse an llm.txt buffer.

    Args:
        text: Full document text

    Returns:
        (Document, fatal Diagnostic or None)

    Example:
        >>> document, fatal = parse(Path("llm.txt").read_text())
        >>> [section.kind for section in document.sections]
    """
    return DocumentScanner(text).scan()
