# content_scout/report/json_report.py

"""
JSON Lines formatter: one serialized ContentItem per line.
"""
import json
from typing import Any, AsyncIterator, Optional

from content_scout.config import FormatterOptions
from content_scout.models import ContentItem
from content_scout.report.base import SinkWriter


class JsonFormatter:
    """
    Writes ``item.to_dict()`` as one JSON object per line.

    Example:
    ```python
    formatter = JsonFormatter()
    await formatter.format(items, sys.stdout)
    ```
    """

    name = "json"

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
                # budget spent: keep draining so every item is still counted
                continue
            data = item.to_dict()
            if not options.include_source:
                data.pop("source", None)
            # Unicode kept as is; non-JSON metadata (timestamps etc.) stringified
            line = json.dumps(data, ensure_ascii=False, default=str)
            await writer.write(line + "\n")
