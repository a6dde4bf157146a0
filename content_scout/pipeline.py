# File: content_scout/pipeline.py
"""content_scout.pipeline: оркестрация Adapter → Transformers → Formatter.

Фасад для CLI и тестов: получает поток элементов от адаптера, прогоняет его
через цепочку трансформеров, считает элементы и ошибки и отдаёт поток
форматтеру, который пишет его в приёмник.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from content_scout.adapters.base import Adapter
from content_scout.config import AdapterOptions, FormatterOptions
from content_scout.errors import PipelineError
from content_scout.logger import get_logger
from content_scout.models import ContentItem
from content_scout.report.base import Formatter
from content_scout.transformers import TransformContext, Transformer, apply_transformers

__all__ = ["PipelineOptions", "PipelineResult", "run_pipeline", "run_pipeline_sync"]

logger = get_logger("pipeline")


class PipelineOptions(BaseModel):
    """Параметры стадий конвейера."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    adapter_options: AdapterOptions = Field(default_factory=AdapterOptions)
    formatter_options: FormatterOptions = Field(default_factory=FormatterOptions)
    transform_context: TransformContext = Field(default_factory=TransformContext)


@dataclass(frozen=True)
class PipelineResult:
    item_count: int
    error_count: int
    duration: float


async def run_pipeline(
    adapter: Adapter,
    transformers: Sequence[Transformer],
    formatter: Formatter,
    source: str,
    sink: Any,
    options: Optional[PipelineOptions] = None,
) -> PipelineResult:
    """Запускает конвейер и возвращает число выведенных элементов и ошибок.

    Элементы с ошибкой не прерывают запуск: они считаются и попадают в вывод.
    Любое исключение адаптера, трансформеров или форматтера заворачивается
    в :class:`PipelineError`.
    """
    options = options or PipelineOptions()
    logger.info("Starting data preparation pipeline for source: %s", source)
    logger.debug(
        "Adapter: %s, Transformers: %s, Formatter: %s",
        adapter.name,
        ", ".join(t.name for t in transformers) or "None",
        formatter.name,
    )

    item_count = 0
    error_count = 0
    started = time.monotonic()

    async def counted(stream: AsyncIterator[ContentItem]) -> AsyncIterator[ContentItem]:
        nonlocal item_count, error_count
        async for item in stream:
            item_count += 1
            if item.error is not None:
                error_count += 1
                logger.warning("Error processing item %s: %s", item.id, item.error)
                logger.debug("Item error details", exc_info=item.error)
            yield item

    try:
        adapter_stream = adapter.get_stream(source, options.adapter_options)
        try:
            async with aclosing(
                apply_transformers(adapter_stream, transformers, options.transform_context)
            ) as transformed, aclosing(counted(transformed)) as stream:
                await formatter.format(stream, sink, options.formatter_options)
        finally:
            # a formatter that stops early must still shut the crawl down
            aclose = getattr(adapter_stream, "aclose", None)
            if aclose is not None:
                await aclose()
    except Exception as exc:
        error = PipelineError(f"Pipeline execution failed: {exc}", exc)
        logger.error("%s", error)
        logger.debug("Pipeline failure details", exc_info=exc)
        raise error from exc

    duration = time.monotonic() - started
    logger.info("Pipeline completed in %.2fs.", duration)
    logger.info("Processed %d items, encountered %d errors.", item_count, error_count)
    return PipelineResult(item_count=item_count, error_count=error_count, duration=duration)


def run_pipeline_sync(
    adapter: Adapter,
    transformers: Sequence[Transformer],
    formatter: Formatter,
    source: str,
    sink: Any,
    options: Optional[PipelineOptions] = None,
) -> PipelineResult:
    """Синхронная обёртка для CLI (``asyncio.run``)."""
    return asyncio.run(run_pipeline(adapter, transformers, formatter, source, sink, options))
