# File: content_scout/errors.py
"""content_scout.errors: иерархия исключений ContentScout.

Per-item errors (:class:`FetchError`, :class:`ExtractionError`,
:class:`TransformerError`) are attached to ``ContentItem.error`` and never
raised out of a stream. :class:`PipelineError` is the only error that aborts
a whole run.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "ContentScoutError",
    "ConfigError",
    "AdapterError",
    "PipelineError",
    "TransformerError",
    "FetchError",
    "ExtractionError",
    "CrawlCancelled",
]


class ContentScoutError(Exception):
    """Базовое исключение проекта."""


class ConfigError(ContentScoutError):
    """Неверная конфигурация или неизвестное имя адаптера/форматтера."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Configuration Error: {message}")


class AdapterError(ContentScoutError):
    """Адаптер не может открыть источник (нет каталога, неверный URL)."""


class PipelineError(ContentScoutError):
    """Ошибка уровня конвейера: оборачивает исходную причину и прерывает запуск."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Data Preparation Error: {message}")
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class TransformerError(ContentScoutError):
    """Трансформер упал на конкретном элементе."""

    def __init__(self, transformer_name: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Transformer {transformer_name} failed")
        self.transformer_name = transformer_name
        if cause is not None:
            self.__cause__ = cause


class FetchError(ContentScoutError):
    """HTTP-загрузка страницы не удалась (таймаут, сеть, статус, редиректы)."""


class ExtractionError(ContentScoutError):
    """Извлечение читаемого контента упало с исключением."""


class CrawlCancelled(ContentScoutError):
    """Обход отменён: достигнут лимит или отмена со стороны вызывающего."""
