"""
Example reference checker.

Scans fenced code blocks tagged with the document's ecosystem language for
dotted identifiers rooted at the package's import name and resolves them
against the documented modules and symbols. Strings and comments are
blanked out first, attribute chains hanging off call results are ignored,
and Python import statements are expanded so that names bound by
`from pkg.mod import Name` or `import pkg.mod as alias` are followed.

This pass is lexical and best-effort: unresolved references are warnings,
never errors.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from llmtxt_check.languages import LanguageRegistry, canonical_language
from llmtxt_check.schemas import (
    CodeBlock,
    Diagnostic,
    DiagnosticCode,
    Document,
    LineSpan,
    Reference,
    SectionKind,
    SymbolTable,
)

logger = logging.getLogger(__name__)


DEFAULT_LANGUAGE = "python"

IDENTIFIER_PATH = r'[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*'

STRING_PATTERNS = {
    'python': (
        r'(?<![\w])[rRbBuUfF]{0,2}(?:"""[\s\S]*?"""|\'\'\'[\s\S]*?\'\'\''
        r'|"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\')'
    ),
    'javascript': r'`(?:\\.|[^`\\])*`|"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\'',
    'typescript': r'`(?:\\.|[^`\\])*`|"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\'',
    'go': r'`[^`]*`|"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\'',
}
DEFAULT_STRING_PATTERN = r'"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\''

TOKEN = re.compile(
    r'(?P<attr>\.\s*' + IDENTIFIER_PATH + r')'
    r'|(?P<number>\d[\w.]*)'
    r'|(?P<ident>' + IDENTIFIER_PATH + r')'
)

FROM_IMPORT = re.compile(r'^\s*from\s+(?P<module>' + IDENTIFIER_PATH + r')\s+import\s+(?P<names>.*)$')
PLAIN_IMPORT = re.compile(r'^\s*import\s+(?P<targets>.*)$')
IMPORT_ALIAS = re.compile(r'^(?P<name>' + IDENTIFIER_PATH + r')(?:\s+as\s+(?P<alias>[A-Za-z_]\w*))?$')
PROMPT = re.compile(r'^\s*(?:>>>|\.\.\.)(?: |$)')


def import_name(package: str) -> str:
    """Import name of a distribution: lowercased, '-' replaced by '_'."""
    return package.strip().replace('-', '_').lower()


def _blank(match: re.Match) -> str:
    return re.sub(r'[^\n]', ' ', match.group(0))


def build_noise_pattern(language: str) -> re.Pattern:
    """Pattern matching string literals and comments for a canonical language."""
    parts = [STRING_PATTERNS.get(language, DEFAULT_STRING_PATTERN)]
    line_comment, block_open, block_close = LanguageRegistry.comment_syntax(language)
    if block_open and block_close:
        parts.append(re.escape(block_open) + r'[\s\S]*?' + re.escape(block_close))
    if line_comment:
        parts.append(re.escape(line_comment) + r'[^\n]*')
    return re.compile('|'.join(f'(?:{part})' for part in parts))


def sanitize(code: str, language: str) -> str:
    """Blank out strings and comments, keeping line structure intact."""
    return build_noise_pattern(language).sub(_blank, code)


@dataclass
class _ScanContext:
    block: CodeBlock
    section: SectionKind
    aliases: Dict[str, str]


class ReferenceExtractor:
    """
    Collect package-rooted dotted references from a document's example code.

    Only blocks whose fence tag maps to the document's language are scanned;
    untagged blocks are skipped. References whose leading segment or any
    dotted prefix is allow-listed are dropped, after import aliases are
    expanded.
    """

    def __init__(self, package: str, language: Optional[str], allowlist: Iterable[str]):
        self.package = import_name(package)
        self.language = canonical_language(language) or DEFAULT_LANGUAGE
        # The document's own package is never allow-listed
        self.allowlist: FrozenSet[str] = frozenset(
            entry for entry in allowlist if entry.lower() != self.package
        )
        self.noise = build_noise_pattern(self.language)

    def extract(self, document: Document) -> List[Reference]:
        references: List[Reference] = []
        seen: Set[Tuple[str, int]] = set()
        # Names bound by imports stay visible in later blocks
        aliases: Dict[str, str] = {}

        for section in document.sections:
            if section.kind == SectionKind.FRONTMATTER:
                continue
            for block in section.code_blocks:
                if canonical_language(block.language) != self.language:
                    continue
                context = _ScanContext(block=block, section=section.kind, aliases=aliases)
                for text, line in self._scan_block(context):
                    key = (text, line)
                    if key in seen:
                        continue
                    seen.add(key)
                    references.append(Reference(
                        text=text,
                        span=LineSpan.line(line),
                        containing_section=section.kind,
                    ))

        logger.debug(f"Extracted {len(references)} references to '{self.package}'")
        return references

    def _scan_block(self, context: _ScanContext):
        lines = self.noise.sub(_blank, context.block.code).split('\n')
        if self.language == 'python':
            lines = [PROMPT.sub('', line) for line in lines]
        first_line = context.block.first_code_line

        index = 0
        while index < len(lines):
            number = first_line + index
            statement = lines[index]

            if self.language == 'python':
                # Join parenthesised `from x import (a, b)` continuation lines
                if FROM_IMPORT.match(statement) and '(' in statement:
                    while ')' not in statement and index + 1 < len(lines):
                        index += 1
                        statement += ' ' + lines[index]
                imported = self._expand_import(statement, context)
                if imported is not None:
                    for text in imported:
                        yield text, number
                    index += 1
                    continue

            for match in TOKEN.finditer(statement):
                raw = match.group('ident')
                if raw is None:
                    continue
                resolved = self._qualify(raw, context)
                if resolved is not None:
                    yield resolved, number
            index += 1

    def _expand_import(self, statement: str, context: _ScanContext) -> Optional[List[str]]:
        """Expand a Python import statement. Returns None if the line is not one."""
        from_match = FROM_IMPORT.match(statement)
        if from_match:
            module = from_match.group('module')
            names = from_match.group('names').replace('(', ' ').replace(')', ' ')
            references = []
            for part in names.split(','):
                part = part.strip()
                if not part or part == '*':
                    continue
                alias_match = IMPORT_ALIAS.match(part)
                if not alias_match:
                    continue
                name = alias_match.group('name')
                full = f"{module}.{name}"
                context.aliases[alias_match.group('alias') or name] = full
                if self._is_package_rooted(full) and not self._is_allowlisted(full):
                    references.append(full)
            return references

        import_match = PLAIN_IMPORT.match(statement)
        if import_match:
            references = []
            for part in import_match.group('targets').split(','):
                alias_match = IMPORT_ALIAS.match(part.strip())
                if not alias_match:
                    continue
                module = alias_match.group('name')
                if alias_match.group('alias'):
                    context.aliases[alias_match.group('alias')] = module
                if self._is_package_rooted(module) and not self._is_allowlisted(module):
                    references.append(module)
            return references

        return None

    def _qualify(self, raw: str, context: _ScanContext) -> Optional[str]:
        """Map a raw dotted identifier to a package-rooted path, or None to skip it."""
        head, _, rest = raw.partition('.')
        if head in context.aliases:
            # Names bound by an import shadow allow-listed ones
            target = context.aliases[head]
            qualified = f"{target}.{rest}" if rest else target
        else:
            qualified = raw

        if self._is_allowlisted(qualified) or not self._is_package_rooted(qualified):
            return None
        return qualified

    def _is_package_rooted(self, text: str) -> bool:
        return text.split('.', 1)[0].lower() == self.package

    def _is_allowlisted(self, text: str) -> bool:
        segments = text.split('.')
        for end in range(1, len(segments) + 1):
            if '.'.join(segments[:end]) in self.allowlist:
                return True
        return False


class ReferenceResolver:
    """Resolve package-rooted references against both symbol tables."""

    def __init__(self, index_table: SymbolTable, module_table: SymbolTable):
        self.symbols: Dict[str, Set[str]] = {}
        for table in (index_table, module_table):
            for module, entries in table.items():
                names = self.symbols.setdefault(module, set())
                for entry in entries:
                    names.add(entry.name)
                    names.add(entry.name.split('.', 1)[0])

        self.modules = set(self.symbols)
        self.ancestors: Set[str] = set()
        for module in self.modules:
            segments = module.split('.')
            for end in range(1, len(segments)):
                self.ancestors.add('.'.join(segments[:end]))

        self.all_names: Set[str] = set()
        for names in self.symbols.values():
            self.all_names.update(names)

    def is_empty(self) -> bool:
        return not self.modules

    def resolves(self, text: str) -> bool:
        segments = text.split('.')

        # Longest documented module (or package ancestor) prefix
        prefix_length = 0
        for end in range(len(segments), 0, -1):
            candidate = '.'.join(segments[:end])
            if candidate in self.modules or candidate in self.ancestors:
                prefix_length = end
                break

        if prefix_length == 0:
            return False
        if prefix_length == len(segments):
            return True

        module = '.'.join(segments[:prefix_length])
        name = segments[prefix_length]
        if module in self.modules:
            return name in self.symbols[module]
        # Re-exported from a parent package, e.g. `geopy.Nominatim`
        return name in self.all_names


def extract_references(document: Document, allowlist: Iterable[str] = ()) -> List[Reference]:
    """Package-rooted references found in the document's example code."""
    if not document.package:
        return []
    return ReferenceExtractor(document.package, document.language, allowlist).extract(document)


def check_references(
    document: Document,
    index_table: SymbolTable,
    module_table: SymbolTable,
    allowlist: Iterable[str],
) -> List[Diagnostic]:
    """
    Report example-code references that do not resolve to documented API.

    Args:
        document: Parsed document
        index_table: Symbols listed in the Index
        module_table: Symbols documented in the Module Sections
        allowlist: Leading identifiers or dotted prefixes to skip

    Returns:
        UnknownSymbolReference warnings
    """
    resolver = ReferenceResolver(index_table, module_table)
    if resolver.is_empty():
        logger.debug("No documented modules; skipping reference check")
        return []

    diagnostics = []
    for reference in extract_references(document, allowlist):
        if resolver.resolves(reference.text):
            continue
        diagnostics.append(Diagnostic.warning(
            DiagnosticCode.UNKNOWN_SYMBOL_REFERENCE,
            f"'{reference.text}' used in example code is not a documented module or symbol",
            reference.span,
            section=reference.containing_section,
            symbol=reference.text,
        ))
    return diagnostics
