"""Parsing components: document scanner and Index outline."""

from .scanner import DocumentScanner, FatalParseError, parse
from .outline import IndexOutlineParser, parse_index_outline

__all__ = [
    "DocumentScanner",
    "FatalParseError",
    "parse",
    "IndexOutlineParser",
    "parse_index_outline",
]
