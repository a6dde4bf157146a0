# File: content_scout/parser/sitemap_parser.py
"""content_scout.parser.sitemap_parser: разбор sitemap.xml и sitemap index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

from lxml import etree

__all__ = ("SitemapDocument", "parse_sitemap")

SitemapKind = Literal["urlset", "sitemapindex", "unknown"]


@dataclass(slots=True)
class SitemapDocument:
    """Результат разбора: тип корневого элемента и найденные ``<loc>``."""

    kind: SitemapKind
    locs: List[str] = field(default_factory=list)

    @property
    def is_index(self) -> bool:
        return self.kind == "sitemapindex"


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname


def parse_sitemap(xml_content: str | bytes) -> SitemapDocument:
    """Разбирает XML sitemap и возвращает SitemapDocument.

    Для ``urlset`` собираются ``url/loc``, для ``sitemapindex`` —
    ``sitemap/loc``; пространства имён игнорируются.

    Args:
        xml_content: строка или байты с содержимым sitemap.xml.

    Returns:
        SitemapDocument; для пустого или нераспознанного документа
        ``kind == "unknown"`` и пустой список.

    Raises:
        ValueError: если документ не удалось разобрать даже в режиме recover.

    Пример:
    ```python
    doc = parse_sitemap(content)
    if doc.is_index:
        ...
    ```
    """
    data = xml_content.encode("utf-8") if isinstance(xml_content, str) else xml_content
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ValueError(f"Invalid sitemap XML: {exc}") from exc
    if root is None:
        return SitemapDocument(kind="unknown")

    root_name = _local_name(root.tag)
    if root_name == "urlset":
        child_name = "url"
    elif root_name == "sitemapindex":
        child_name = "sitemap"
    else:
        return SitemapDocument(kind="unknown")

    locs: List[str] = []
    for entry in root:
        if _local_name(entry.tag) != child_name:
            continue
        for loc in entry:
            if _local_name(loc.tag) == "loc" and loc.text and loc.text.strip():
                locs.append(loc.text.strip())
    return SitemapDocument(kind=root_name, locs=locs)  # type: ignore[arg-type]
