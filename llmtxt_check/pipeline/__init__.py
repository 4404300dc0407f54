"""Batch validation."""

from .runner import BatchValidationRunner, validate_batch

__all__ = ["BatchValidationRunner", "validate_batch"]
