# File: content_scout/transformers.py
"""content_scout.transformers: поэлементные преобразования потока ContentItem.

Трансформер получает элемент и общий контекст только для чтения и
возвращает тот же элемент, новый элемент или ``None`` (отфильтровать).
``transform`` может быть обычной функцией или корутиной.
"""
from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from content_scout.errors import ConfigError, TransformerError
from content_scout.logger import get_logger
from content_scout.models import ContentItem

__all__ = [
    "TransformContext",
    "Transformer",
    "WhitespaceTransformer",
    "DropEmptyTransformer",
    "TRANSFORMERS",
    "get_transformer",
    "apply_transformers",
]

logger = get_logger("transform")

TransformResult = Union[Optional[ContentItem], Awaitable[Optional[ContentItem]]]


@dataclass(frozen=True)
class TransformContext:
    """Общий контекст конвейера (например, флаги CLI)."""

    flags: Mapping[str, Any] = field(default_factory=dict)


class Transformer(Protocol):
    name: str

    def transform(self, item: ContentItem, context: TransformContext) -> TransformResult:
        ...


# Files whose meaning depends on indentation or exact spacing.
_WHITESPACE_SENSITIVE_EXT = {".py", ".yaml", ".yml", ".md", ".markdown", ".rst", ".mk", ".diff", ".patch"}
_WHITESPACE_SENSITIVE_NAMES = {"Makefile", "makefile", "GNUmakefile", "Dockerfile"}

_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUNS = re.compile(r"\n{3,}")


class WhitespaceTransformer:
    """Убирает хвостовые пробелы и схлопывает серии пустых строк."""

    name = "whitespace"

    @staticmethod
    def is_sensitive(item: ContentItem) -> bool:
        if item.adapter_name != "filesystem":
            return False
        path = PurePosixPath(item.id)
        return path.suffix.lower() in _WHITESPACE_SENSITIVE_EXT or path.name in _WHITESPACE_SENSITIVE_NAMES

    def transform(self, item: ContentItem, context: TransformContext) -> Optional[ContentItem]:
        if not item.content or self.is_sensitive(item):
            return item
        cleaned = _BLANK_RUNS.sub("\n\n", _TRAILING_WS.sub("", item.content)).strip() + "\n"
        if cleaned == item.content:
            return item
        return item.replace(content=cleaned)


class DropEmptyTransformer:
    """Отбрасывает элементы без содержимого и без ошибки."""

    name = "drop-empty"

    def transform(self, item: ContentItem, context: TransformContext) -> Optional[ContentItem]:
        if item.has_error or (item.content and item.content.strip()):
            return item
        return None


TRANSFORMERS: Dict[str, Callable[[], Transformer]] = {
    WhitespaceTransformer.name: WhitespaceTransformer,
    DropEmptyTransformer.name: DropEmptyTransformer,
}


def get_transformer(name: str) -> Transformer:
    try:
        return TRANSFORMERS[name]()
    except KeyError:
        raise ConfigError(f"unknown transformer {name!r}; available: {', '.join(sorted(TRANSFORMERS))}") from None


async def apply_transformers(
    items: AsyncIterator[ContentItem],
    transformers: Sequence[Transformer],
    context: TransformContext,
) -> AsyncIterator[ContentItem]:
    """Прогоняет каждый элемент через цепочку в заданном порядке.

    ``None`` от любого трансформера выбрасывает элемент и прерывает цепочку
    для него. Исключение трансформера не останавливает конвейер: оно
    заворачивается в TransformerError и прикрепляется к элементу, следующие
    трансформеры продолжают работу.
    """
    if not transformers:
        async for item in items:
            yield item
        return

    logger.debug("Applying %d transformers…", len(transformers))
    names: List[str] = [t.name for t in transformers]
    async for item in items:
        current: Optional[ContentItem] = item
        for transformer in transformers:
            try:
                result = transformer.transform(current, context)  # type: ignore[arg-type]
                if inspect.isawaitable(result):
                    result = await result
                current = result
            except Exception as exc:
                logger.warning("Transformer %s failed for item %s: %s", transformer.name, item.id, exc)
                logger.debug("Transformer failure details", exc_info=True)
                current = current.replace(error=TransformerError(transformer.name, exc))  # type: ignore[union-attr]
            if current is None:
                logger.debug("Item %s filtered out by transformer: %s", item.id, transformer.name)
                break
        if current is not None:
            yield current
    logger.debug("Finished applying transformers: %s", ", ".join(names))
