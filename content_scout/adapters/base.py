# content_scout/adapters/base.py
"""
Adapter contract: a source (directory, website) behind one streaming interface.
"""
from __future__ import annotations

from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from content_scout.config import AdapterOptions
from content_scout.models import ContentItem

__all__ = ("Adapter",)


@runtime_checkable
class Adapter(Protocol):
    """Produces a lazy, finite, non-restartable stream of ContentItem.

    Failures scoped to one unit of input are attached to that item's
    ``error``; only failures to open the source itself may raise.
    """

    name: str

    def get_stream(self, source: str, options: Optional[AdapterOptions] = None) -> AsyncIterator[ContentItem]:
        ...
