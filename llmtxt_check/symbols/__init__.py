"""Symbol table construction and cross-referencing."""

from .builder import build_index_table, build_module_table, unrecognized_header_diagnostics
from .resolver import CrossReferenceResolver, resolve

__all__ = [
    "build_index_table",
    "build_module_table",
    "unrecognized_header_diagnostics",
    "CrossReferenceResolver",
    "resolve",
]
