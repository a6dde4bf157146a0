# File: content_scout/adapters/__init__.py
"""content_scout.adapters: реестр адаптеров источников.

Реестр представляет собой явное отображение ``имя → фабрика``; динамической загрузки модулей
по пути нет, сторонний код регистрирует свои адаптеры через
:func:`register_adapter`.
"""
from __future__ import annotations

from typing import Callable, Dict, List

from content_scout.adapters.base import Adapter
from content_scout.adapters.filesystem import FileSystemAdapter, create_filesystem_adapter
from content_scout.adapters.website import WebsiteAdapter, create_website_adapter
from content_scout.errors import ConfigError

__all__ = [
    "Adapter",
    "AdapterFactory",
    "ADAPTERS",
    "FileSystemAdapter",
    "WebsiteAdapter",
    "available_adapters",
    "create_filesystem_adapter",
    "create_website_adapter",
    "get_adapter",
    "register_adapter",
]

AdapterFactory = Callable[[], Adapter]

ADAPTERS: Dict[str, AdapterFactory] = {
    "filesystem": create_filesystem_adapter,
    "website": create_website_adapter,
}


def register_adapter(name: str, factory: AdapterFactory, *, replace: bool = False) -> None:
    """Регистрирует фабрику адаптера под именем *name*."""
    if name in ADAPTERS and not replace:
        raise ConfigError(f"adapter {name!r} is already registered")
    ADAPTERS[name] = factory


def get_adapter(name: str) -> Adapter:
    """Создаёт адаптер по имени; для неизвестного имени бросает ConfigError."""
    try:
        factory = ADAPTERS[name]
    except KeyError:
        raise ConfigError(f"unknown adapter {name!r}; available: {', '.join(available_adapters())}") from None
    return factory()


def available_adapters() -> List[str]:
    return sorted(ADAPTERS)
