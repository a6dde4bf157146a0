# File: content_scout/report/__init__.py
"""content_scout.report: форматтеры вывода (json, markdown, text) и их реестр."""

from __future__ import annotations

from typing import Callable, Dict

from content_scout.errors import ConfigError
from content_scout.report.base import Formatter, SinkWriter, estimate_tokens
from content_scout.report.json_report import JsonFormatter
from content_scout.report.markdown_report import MarkdownFormatter, TextFormatter

FORMATTERS: Dict[str, Callable[[], Formatter]] = {
    JsonFormatter.name: JsonFormatter,
    MarkdownFormatter.name: MarkdownFormatter,
    TextFormatter.name: TextFormatter,
}


def get_formatter(name: str) -> Formatter:
    """Создаёт форматтер по имени; для неизвестного имени бросает ConfigError."""
    try:
        return FORMATTERS[name]()
    except KeyError:
        raise ConfigError(f"unknown formatter {name!r}; available: {', '.join(sorted(FORMATTERS))}") from None


__all__ = [
    "FORMATTERS",
    "Formatter",
    "JsonFormatter",
    "MarkdownFormatter",
    "SinkWriter",
    "TextFormatter",
    "estimate_tokens",
    "get_formatter",
]
