"""Example code reference checking."""

from .checker import ReferenceExtractor, ReferenceResolver, check_references, extract_references

__all__ = ["ReferenceExtractor", "ReferenceResolver", "check_references", "extract_references"]
