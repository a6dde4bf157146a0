# File: content_scout/report/base.py
"""content_scout.report.base: общий контракт форматтеров и запись в приёмник.

Приёмник (sink) — любой текстовый объект с ``write(str)``; если у него есть
корутина ``drain()`` (как у :class:`asyncio.StreamWriter`), она ожидается
после каждой записи, так что медленный приёмник тормозит весь конвейер.
"""
from __future__ import annotations

import inspect
from typing import Any, AsyncIterator, Optional, Protocol

from content_scout.config import FormatterOptions
from content_scout.logger import get_logger
from content_scout.models import ContentItem

__all__ = ["Formatter", "SinkWriter", "estimate_tokens"]

logger = get_logger("format")


def estimate_tokens(text: str) -> int:
    """Грубая оценка числа токенов: ~4 символа на токен."""
    return (len(text) + 3) // 4 if text else 0


class Formatter(Protocol):
    name: str

    async def format(
        self,
        items: AsyncIterator[ContentItem],
        sink: Any,
        options: Optional[FormatterOptions] = None,
    ) -> None:
        ...


class SinkWriter:
    """Пишет фрагменты в приёмник и следит за бюджетом ``max_tokens``."""

    def __init__(self, sink: Any, max_tokens: Optional[int] = None) -> None:
        self.sink = sink
        self.max_tokens = max_tokens
        self.tokens = 0
        self.exhausted = False

    async def write(self, chunk: str) -> bool:
        """Записывает *chunk*; False, если бюджет токенов исчерпан и запись пропущена."""
        if self.exhausted:
            return False
        if self.max_tokens is not None:
            cost = estimate_tokens(chunk)
            if self.tokens + cost > self.max_tokens:
                logger.warning("Token budget (%d) reached; remaining items are not written.", self.max_tokens)
                self.exhausted = True
                return False
            self.tokens += cost
        result = self.sink.write(chunk)
        if inspect.isawaitable(result):
            await result
        drain = getattr(self.sink, "drain", None)
        if drain is not None:
            pending = drain()
            if inspect.isawaitable(pending):
                await pending
        return True
