# File: content_scout/report/markdown_report.py
"""content_scout.report.markdown_report: Markdown- и текстовый вывод через Jinja2."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, AsyncIterator, Dict, Optional

from jinja2 import DictLoader, Environment, select_autoescape

from content_scout.config import FormatterOptions
from content_scout.models import ContentItem
from content_scout.report.base import SinkWriter

__all__ = ["MarkdownFormatter", "TextFormatter", "render_item"]

_TEMPLATES: Dict[str, str] = {
    "file.md.j2": (
        "{% if include_source %}# {{ item.id }}\n\n{% endif %}"
        "```{{ lang }}\n{{ item.content or '' }}\n```\n\n"
    ),
    "page.md.j2": "{% if item.title %}# {{ item.title }}\n\n{% endif %}{{ item.content or '' }}\n\n",
}

_env = Environment(
    loader=DictLoader(_TEMPLATES),
    # Markdown output, not HTML: nothing to escape
    autoescape=select_autoescape(enabled_extensions=(), default_for_string=False, default=False),
    keep_trailing_newline=True,
)


def render_item(item: ContentItem, options: Optional[FormatterOptions] = None, *, code_blocks: bool = True) -> str:
    """Рендерит один элемент в Markdown.

    Файлы (адаптер ``filesystem``) оформляются заголовком с относительным
    путём и блоком кода с языком по расширению; остальные — заголовком
    ``title`` (если есть) и содержимым.
    """
    options = options or FormatterOptions()
    context: Dict[str, Any] = {"item": item, "include_source": options.include_source}
    if code_blocks and item.adapter_name == "filesystem":
        context["lang"] = PurePosixPath(item.id).suffix.lstrip(".")
        return _env.get_template("file.md.j2").render(**context)
    return _env.get_template("page.md.j2").render(**context)


class MarkdownFormatter:
    name = "markdown"
    code_blocks = True

    async def format(
        self,
        items: AsyncIterator[ContentItem],
        sink: Any,
        options: Optional[FormatterOptions] = None,
    ) -> None:
        options = options or FormatterOptions()
        writer = SinkWriter(sink, options.max_tokens)
        async for item in items:
            if writer.exhausted:
                continue
            await writer.write(render_item(item, options, code_blocks=self.code_blocks))


class TextFormatter(MarkdownFormatter):
    """Title heading plus raw content for every item, files included."""

    name = "text"
    code_blocks = False
