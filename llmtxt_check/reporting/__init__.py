"""Diagnostic aggregation."""

from .reporter import DiagnosticReporter, build_report

__all__ = ["DiagnosticReporter", "build_report"]
