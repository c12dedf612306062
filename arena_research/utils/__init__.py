"""Utility modules for arena-research.

This package provides output formatting for the terminal, Markdown and JSON.
"""

from arena_research.utils.formatters import (
    DataFormatter,
    JSONFormatter,
    MarkdownFormatter,
    OutputFormat,
    TerminalFormatter,
    format_pagination,
    to_json,
)

__all__ = [
    "DataFormatter",
    "JSONFormatter",
    "MarkdownFormatter",
    "OutputFormat",
    "TerminalFormatter",
    "format_pagination",
    "to_json",
]
