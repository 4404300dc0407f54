"""Utility functions for llmtxt-check."""

from .file_scanner import FileScanner, discover_llm_txt

__all__ = ["FileScanner", "discover_llm_txt"]
