# File: content_scout/ignore.py
"""content_scout.ignore: gitignore-подобные фильтры для файлового адаптера.

Поддерживаемый синтаксис (подмножество .gitignore):

* шаблон без ``/`` совпадает с любым компонентом пути (``*.pyc``, ``node_modules``);
* ``/`` в начале привязывает шаблон к корню каталога;
* ``/`` в конце — только каталоги (и всё, что внутри них);
* ``**`` — любое число сегментов;
* ``!шаблон`` возвращает ранее исключённый путь.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from content_scout.config import IgnorePatterns
from content_scout.crawler.link_extractor import glob_to_regex, match_path
from content_scout.logger import get_logger

__all__ = (
    "DEFAULT_IGNORES",
    "IgnoreFilter",
    "create_ignore_filter",
    "read_ignore_file",
    "InclusionChecker",
    "DEFAULT_IGNORE_FILE",
    "build_ignore_patterns",
)

logger = get_logger("ignore")

DEFAULT_IGNORES: List[str] = [
    # Version control
    ".git",
    ".svn",
    ".hg",
    # Node.js
    "node_modules",
    "package-lock.json",
    "npm-debug.log*",
    "yarn.lock",
    "yarn-error.log",
    "pnpm-lock.yaml",
    "bun.lockb",
    "deno.lock",
    # Python
    "__pycache__",
    "*.pyc",
    "*.pyo",
    "*.pyd",
    ".Python",
    "*.egg-info/",
    "*.egg",
    ".eggs/",
    ".venv",
    "venv/",
    "env/",
    ".tox/",
    ".nox/",
    ".mypy_cache/",
    ".pytest_cache/",
    ".hypothesis/",
    "htmlcov/",
    ".coverage",
    ".coverage.*",
    "coverage.xml",
    "nosetests.xml",
    "*.cover",
    # Build outputs
    "dist",
    "build",
    "out",
    "target",
    "bin",
    "obj",
    ".next",
    ".nuxt",
    ".svelte-kit",
    ".vercel",
    ".netlify",
    ".serverless",
    ".terraform",
    # OS files
    ".DS_Store",
    "Thumbs.db",
    "._*",
    # IDE / editor files
    ".vscode",
    ".idea",
    "*.sublime-workspace",
    "*.sublime-project",
    ".project",
    ".classpath",
    ".settings",
    # Logs and temp files
    "*.log",
    "*.tmp",
    "*.temp",
    "*.swp",
    "*~",
    # Secrets
    ".env",
    ".env.*",
    "!*.env.example",
    "*.pem",
    "*.key",
    "credentials*",
    "secrets*",
    # Caches and test reports
    ".cache",
    ".turbo",
    "coverage",
    "junit.xml",
    "report*.xml",
    "test-results",
    # Own output files
    "codebase.md",
    "site_content.md",
]


@dataclass(slots=True)
class _Rule:
    regex: re.Pattern[str]
    negate: bool
    dir_only: bool
    anchored: bool
    source: str


def _compile(pattern: str) -> Optional[_Rule]:
    raw = pattern.strip()
    if not raw or raw.startswith("#"):
        return None
    negate = raw.startswith("!")
    if negate:
        raw = raw[1:]
    dir_only = raw.endswith("/")
    raw = raw.rstrip("/") if dir_only else raw
    anchored = raw.startswith("/") or "/" in raw.rstrip("/")
    raw = raw.lstrip("/")
    if not raw:
        return None
    return _Rule(re.compile(glob_to_regex(raw)), negate, dir_only, anchored, pattern)


class IgnoreFilter:
    """Набор правил одной группы (например, ``.gitignore``)."""

    def __init__(self, patterns: Iterable[str] = (), description: str = "patterns") -> None:
        self.description = description
        self._rules: List[_Rule] = [rule for rule in map(_compile, patterns) if rule is not None]

    def __bool__(self) -> bool:
        return bool(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def _rule_matches(self, rule: _Rule, parts: Sequence[str], is_dir: bool) -> bool:
        # a path is matched if it or any of its parent directories matches
        for depth in range(1, len(parts) + 1):
            candidate_is_dir = is_dir or depth < len(parts)
            if rule.dir_only and not candidate_is_dir:
                continue
            if rule.anchored:
                if rule.regex.match("/".join(parts[:depth])):
                    return True
            elif rule.regex.match(parts[depth - 1]):
                return True
        return False

    def ignores(self, relative_path: Union[str, PurePosixPath], is_dir: bool = False) -> bool:
        """True if *relative_path* (POSIX, relative to the root) is ignored; last matching rule wins."""
        parts = [p for p in PurePosixPath(relative_path).parts if p not in ("", ".")]
        if not parts:
            return False
        ignored = False
        for rule in self._rules:
            if rule.negate == ignored and self._rule_matches(rule, parts, is_dir):
                ignored = not rule.negate
        return ignored


def create_ignore_filter(patterns: Sequence[str], description: str) -> IgnoreFilter:
    """Создаёт фильтр из списка шаблонов и логирует, откуда они взялись."""
    flt = IgnoreFilter(patterns, description)
    if flt:
        logger.debug("Adding %d ignore patterns from %s", len(flt), description)
    else:
        logger.debug("No ignore patterns found from %s.", description)
    return flt


def read_ignore_file(path: Union[str, Path]) -> List[str]:
    """Читает ignore-файл: непустые строки без комментариев.

    Для отсутствующего файла возвращается пустой список; прочие ошибки чтения
    пробрасываются.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Ignore file not found: %s", p)
        return []
    logger.debug("Read ignore file: %s", p)
    return [line.strip() for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]


@dataclass
class InclusionChecker:
    """Объединяет группы фильтров и шаблоны ``match``/``exclude``.

    Порядок проверки: exclude → группы ignore → match (если задан, путь
    обязан ему соответствовать).
    """

    filters: Dict[str, IgnoreFilter] = field(default_factory=dict)
    match: Optional[Sequence[str]] = None
    exclude: Optional[Sequence[str]] = None

    def ignored_by(self, relative_path: str, is_dir: bool = False) -> Optional[str]:
        """Имя группы, исключившей путь, или None."""
        if self.exclude and match_path(relative_path, self.exclude):
            return "exclude"
        for key, flt in self.filters.items():
            if flt and flt.ignores(relative_path, is_dir=is_dir):
                return key
        return None

    def __call__(self, relative_path: str) -> bool:
        if self.ignored_by(relative_path) is not None:
            return False
        return match_path(relative_path, self.match)


DEFAULT_IGNORE_FILE = ".content-scout-ignore"


def build_ignore_patterns(
    root: Union[str, Path],
    *,
    cli: Sequence[str] = (),
    ignore_file: Optional[str] = None,
    use_gitignore: bool = True,
    default_ignores: bool = True,
) -> Tuple[IgnorePatterns, str]:
    """Собирает группы шаблонов для каталога *root*.

    Пользовательский ignore-файл и ``.gitignore`` ищутся относительно
    *root*. Возвращает шаблоны и абсолютный путь к ignore-файлу.
    """
    base = Path(root).expanduser().resolve()
    custom_path = (base / (ignore_file or DEFAULT_IGNORE_FILE)).resolve()
    patterns = IgnorePatterns(
        default=list(DEFAULT_IGNORES) if default_ignores else [],
        cli=list(cli),
        custom_file=read_ignore_file(custom_path),
        gitignore=read_ignore_file(base / ".gitignore") if use_gitignore else [],
    )
    return patterns, str(custom_path)
