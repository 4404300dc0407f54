"""
Diagnostic reporter.

Merges the diagnostic lists returned by each pipeline stage, stable-sorts
them by (line, severity, code) and assembles the final Report.
"""

import logging
from typing import Iterable, List, Optional

from llmtxt_check.schemas import Diagnostic, Report, Severity

logger = logging.getLogger(__name__)


class DiagnosticReporter:
    """Collect diagnostics stage by stage and build a Report."""

    def __init__(self, source: Optional[str] = None):
        self.source = source
        self._batches: List[List[Diagnostic]] = []

    def add(self, diagnostics: Iterable[Diagnostic]) -> "DiagnosticReporter":
        self._batches.append(list(diagnostics))
        return self

    def merged(self) -> List[Diagnostic]:
        """All diagnostics in stage order, then stably sorted."""
        merged = [diagnostic for batch in self._batches for diagnostic in batch]
        return sorted(merged, key=Diagnostic.sort_key)

    def has_errors(self) -> bool:
        return any(
            diagnostic.severity == Severity.ERROR
            for batch in self._batches
            for diagnostic in batch
        )

    def build(self) -> Report:
        diagnostics = self.merged()
        ok = not any(diagnostic.severity == Severity.ERROR for diagnostic in diagnostics)
        logger.debug(f"Report for {self.source or '<text>'}: {len(diagnostics)} diagnostics, ok={ok}")
        return Report(source=self.source, diagnostics=diagnostics, ok=ok)

    @staticmethod
    def fatal(diagnostic: Diagnostic, source: Optional[str] = None) -> Report:
        """Report for a structurally broken document: exactly the fatal diagnostic."""
        return Report(source=source, diagnostics=[diagnostic], ok=False, fatal=True)


def build_report(stages: Iterable[Iterable[Diagnostic]], source: Optional[str] = None) -> Report:
    """Merge per-stage diagnostic lists into a sorted Report."""
    reporter = DiagnosticReporter(source)
    for diagnostics in stages:
        reporter.add(diagnostics)
    return reporter.build()
