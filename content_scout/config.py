# === FILE: content_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации ContentScout.
Используется Pydantic для описания схемы и проверки данных.

Опции адаптеров, форматтеров и целого запуска (:class:`RunConfig`) описаны
здесь, чтобы CLI, конвейер и тесты опирались на одну схему.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

__all__ = [
    "DEFAULT_USER_AGENT",
    "FETCH_TIMEOUT",
    "IgnorePatterns",
    "AdapterOptions",
    "FormatterOptions",
    "RunConfig",
    "load_config",
]

DEFAULT_USER_AGENT = "ContentScout/0.1 (+https://github.com/content-scout)"
FETCH_TIMEOUT = 15.0


class IgnorePatterns(BaseModel):
    """Группы gitignore-шаблонов для файлового адаптера."""
    model_config = ConfigDict(extra="forbid")

    default: List[str] = Field(default_factory=list)
    cli: List[str] = Field(default_factory=list)
    custom_file: List[str] = Field(default_factory=list)
    gitignore: List[str] = Field(default_factory=list)


class AdapterOptions(BaseModel):
    """Опции, передаваемые в ``Adapter.get_stream``."""
    model_config = ConfigDict(extra="forbid")

    match: Optional[List[str]] = Field(None, description="Glob-шаблоны путей для включения.")
    content_selector: Optional[str] = Field(None, description="CSS-селектор основного контента.")
    concurrency: int = Field(5, ge=1, description="Число параллельных загрузок.")
    limit: Optional[int] = Field(None, ge=1, description="Макс. число попыток загрузки.")
    depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    use_sitemap: bool = Field(True, description="Искать sitemap.xml перед обходом HTML.")
    ignore_patterns: IgnorePatterns = Field(default_factory=IgnorePatterns)
    use_gitignore: bool = Field(True, description="Применять правила .gitignore.")
    ignore_file_path: Optional[str] = Field(None, description="Путь к пользовательскому ignore-файлу.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    timeout: float = Field(FETCH_TIMEOUT, gt=0, description="Таймаут на один запрос (секунд).")

    @field_validator("match", mode="before")
    def _coerce_match(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        if isinstance(v, (list, tuple)) and not v:
            return None
        return v


class FormatterOptions(BaseModel):
    """Опции форматтера."""
    model_config = ConfigDict(extra="forbid")

    include_source: bool = True
    max_tokens: Optional[int] = Field(None, ge=1)


class RunConfig(BaseModel):
    """Конфигурация одного запуска конвейера (команда ``run --config``)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    source: str = Field(..., min_length=1, description="Каталог, URL или путь к sitemap.")
    adapter: Literal["website", "filesystem"] = "website"
    output: str = Field("site_content.md", min_length=1)
    format: Literal["markdown", "json", "text"] = "markdown"
    transformers: List[str] = Field(default_factory=list)
    adapter_options: AdapterOptions = Field(default_factory=AdapterOptions)
    formatter_options: FormatterOptions = Field(default_factory=FormatterOptions)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path]) -> RunConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект RunConfig.
    При отсутствии файла бросает FileNotFoundError, при нарушении схемы —
    pydantic.ValidationError.
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    data: Dict[str, Any]
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return RunConfig(**data)
