"""Frontmatter and section schema validators."""

from .frontmatter import FrontmatterValidator, validate_frontmatter
from .sections import SectionSchemaValidator, validate_sections

__all__ = [
    "FrontmatterValidator",
    "validate_frontmatter",
    "SectionSchemaValidator",
    "validate_sections",
]
