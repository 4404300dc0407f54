"""
Frontmatter validation.

Rules:
- package, version, language and summary must all be present
- recognised keys must hold string scalars
- language should belong to the accepted ecosystem set (warning)
- version should be a dotted numeric sequence, optionally with a
  pre-release or local suffix (warning)
- summary should not be blank (warning)

Unrecognised keys are preserved on the Frontmatter and never diagnosed.
"""

import logging
import re
from typing import Iterable, List, Optional

from llmtxt_check.languages import canonical_language
from llmtxt_check.schemas import (
    Diagnostic,
    DiagnosticCode,
    Frontmatter,
    LineSpan,
    SectionKind,
)

logger = logging.getLogger(__name__)


REQUIRED_KEYS = ("package", "version", "language", "summary")

# 1, 2.4, 2.4.1, 1.0rc1, 1.0.0-beta.2, 2.0.post1, 1.2+local.3, v2.1
VERSION_PATTERN = re.compile(
    r'^v?\d+(?:\.\d+)*'
    r'(?:[-_.]?(?:alpha|beta|preview|pre|post|dev|rc|a|b|c)(?![A-Za-z])[-_.]?\d*)*'
    r'(?:-[A-Za-z0-9]+(?:\.[A-Za-z0-9]+)*)?'
    r'(?:\+[A-Za-z0-9]+(?:[.\-][A-Za-z0-9]+)*)?$',
    re.IGNORECASE
)


def is_valid_version(version: str) -> bool:
    return bool(VERSION_PATTERN.match(version.strip()))


class FrontmatterValidator:
    """Check a parsed Frontmatter block against the required keys and value rules."""

    def __init__(self, accepted_languages: Iterable[str]):
        self.accepted_languages = {
            canonical_language(language) for language in accepted_languages if language
        }

    def validate(self, frontmatter: Optional[Frontmatter]) -> List[Diagnostic]:
        if frontmatter is None:
            return [Diagnostic.error(
                DiagnosticCode.MISSING_FRONTMATTER,
                "Document does not start with a '---' frontmatter block "
                "declaring package, version, language and summary",
                LineSpan.line(1, 0),
                section=SectionKind.FRONTMATTER,
            )]

        diagnostics = []
        if frontmatter.error:
            span = LineSpan.line(frontmatter.error_line) if frontmatter.error_line else frontmatter.span
            diagnostics.append(Diagnostic.error(
                DiagnosticCode.INVALID_FRONTMATTER_FIELD,
                frontmatter.error,
                span,
                section=SectionKind.FRONTMATTER,
            ))

        for key in REQUIRED_KEYS:
            if key in frontmatter.invalid:
                diagnostics.append(Diagnostic.error(
                    DiagnosticCode.INVALID_FRONTMATTER_FIELD,
                    f"Frontmatter key '{key}' must be a string, got {frontmatter.invalid[key]}",
                    frontmatter.span_for(key),
                    section=SectionKind.FRONTMATTER,
                ))
            elif frontmatter.get(key) is None:
                diagnostics.append(Diagnostic.error(
                    DiagnosticCode.MISSING_FRONTMATTER_FIELD,
                    f"Frontmatter is missing required key '{key}'",
                    frontmatter.span,
                    section=SectionKind.FRONTMATTER,
                ))

        diagnostics.extend(self._check_package(frontmatter))
        diagnostics.extend(self._check_language(frontmatter))
        diagnostics.extend(self._check_version(frontmatter))
        diagnostics.extend(self._check_summary(frontmatter))

        logger.debug(f"Frontmatter validation produced {len(diagnostics)} diagnostics")
        return diagnostics

    def _check_package(self, frontmatter: Frontmatter) -> List[Diagnostic]:
        package = frontmatter.get("package")
        if package is None or package:
            return []
        return [Diagnostic.error(
            DiagnosticCode.INVALID_FRONTMATTER_FIELD,
            "Frontmatter key 'package' is empty",
            frontmatter.span_for("package"),
            section=SectionKind.FRONTMATTER,
        )]

    def _check_language(self, frontmatter: Frontmatter) -> List[Diagnostic]:
        language = frontmatter.get("language")
        if language is None:
            return []
        if language and canonical_language(language) in self.accepted_languages:
            return []
        accepted = ", ".join(sorted(self.accepted_languages)) or "(none)"
        return [Diagnostic.warning(
            DiagnosticCode.UNEXPECTED_LANGUAGE,
            f"Language '{language}' is not one of the accepted languages: {accepted}",
            frontmatter.span_for("language"),
            section=SectionKind.FRONTMATTER,
        )]

    def _check_version(self, frontmatter: Frontmatter) -> List[Diagnostic]:
        version = frontmatter.get("version")
        if version is None or is_valid_version(version):
            return []
        return [Diagnostic.warning(
            DiagnosticCode.INVALID_VERSION,
            f"Version '{version}' is not a dotted numeric version such as '2.4.1' or '1.0rc1'",
            frontmatter.span_for("version"),
            section=SectionKind.FRONTMATTER,
        )]

    def _check_summary(self, frontmatter: Frontmatter) -> List[Diagnostic]:
        summary = frontmatter.get("summary")
        if summary is None or summary.strip():
            return []
        return [Diagnostic.warning(
            DiagnosticCode.EMPTY_SUMMARY,
            "Frontmatter 'summary' is empty",
            frontmatter.span_for("summary"),
            section=SectionKind.FRONTMATTER,
        )]


def validate_frontmatter(frontmatter: Optional[Frontmatter], accepted_languages: Iterable[str]) -> List[Diagnostic]:
    """
    Validate a frontmatter block.

    Args:
        frontmatter: Parsed frontmatter, or None if the document has none
        accepted_languages: Ecosystem languages accepted for the `language` key

    Returns:
        List of diagnostics (empty if the block is valid)
    """
    return FrontmatterValidator(accepted_languages).validate(frontmatter)
