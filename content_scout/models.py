# content_scout/models.py
"""
Data models shared by every pipeline stage.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

__all__ = ("ItemKind", "ContentItem")


class ItemKind(str, Enum):
    """Kind of payload carried by a :class:`ContentItem`."""

    TEXT = "text"
    BINARY = "binary"
    IMAGE = "image"
    SVG = "svg"
    OTHER = "other"


@dataclass(slots=True)
class ContentItem:
    """One unit of ingested content (a file or a web page).

    Items are values: a transformer that wants to change one should return
    :meth:`replace` rather than rely on mutating a shared instance.
    """

    id: str
    source: str
    adapter_name: str
    kind: ItemKind = ItemKind.TEXT
    content: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[BaseException] = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def title(self) -> Optional[str]:
        return self.metadata.get("title")

    def replace(self, **changes: Any) -> ContentItem:
        """Return a copy with *changes* applied; metadata is copied, not shared."""
        changes.setdefault("metadata", dict(self.metadata))
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable representation used by the ``json`` formatter."""
        error: Optional[Dict[str, str]] = None
        if self.error is not None:
            error = {"type": type(self.error).__name__, "message": str(self.error)}
        return {
            "id": self.id,
            "source": self.source,
            "adapter": self.adapter_name,
            "type": self.kind.value,
            "content": self.content,
            "metadata": self.metadata,
            "error": error,
        }
