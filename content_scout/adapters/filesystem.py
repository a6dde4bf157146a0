# content_scout/adapters/filesystem.py
"""
Filesystem adapter: walks a directory tree and streams one item per file.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Iterator, Optional, Tuple

from content_scout.adapters.base import Adapter
from content_scout.config import AdapterOptions
from content_scout.errors import AdapterError
from content_scout.ignore import InclusionChecker, create_ignore_filter
from content_scout.logger import get_logger
from content_scout.models import ContentItem, ItemKind

__all__ = ("ADAPTER_NAME", "FileSystemAdapter", "create_filesystem_adapter", "is_binary", "file_metadata")

ADAPTER_NAME = "filesystem"

logger = get_logger("adapter.filesystem")

_SNIFF_BYTES = 8192
_TEXT_CHARS = bytes({7, 8, 9, 10, 12, 13, 27} | set(range(0x20, 0x100)) - {0x7F})


def is_binary(sample: bytes) -> bool:
    """NUL byte or more than 30 % control characters in *sample* means binary."""
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    nontext = sample.translate(None, _TEXT_CHARS)
    return len(nontext) / len(sample) > 0.30


def file_metadata(path: Path) -> Dict[str, Any]:
    stat = path.stat()
    return {
        "size": stat.st_size,
        "created": getattr(stat, "st_birthtime", stat.st_ctime),
        "modified": stat.st_mtime,
        "accessed": stat.st_atime,
        "file_path": str(path),
        "file_name": path.name,
        "file_ext": path.suffix,
    }


def _load(path: Path) -> Tuple[ItemKind, Optional[str], Dict[str, Any]]:
    metadata = file_metadata(path)
    with path.open("rb") as fh:
        head = fh.read(_SNIFF_BYTES)
        if is_binary(head):
            return ItemKind.BINARY, None, metadata
        data = head + fh.read()
    kind = ItemKind.SVG if path.suffix.lower() == ".svg" else ItemKind.TEXT
    return kind, data.decode("utf-8", errors="replace"), metadata


class FileSystemAdapter:
    """Directory walk with gitignore-style filtering."""

    name = ADAPTER_NAME

    def _checker(self, options: AdapterOptions) -> InclusionChecker:
        patterns = options.ignore_patterns
        filters = {
            "default": create_ignore_filter(patterns.default, "default patterns"),
            "cli": create_ignore_filter(patterns.cli, "CLI --ignore"),
            "custom": create_ignore_filter(patterns.custom_file, options.ignore_file_path or "custom ignore file"),
        }
        if options.use_gitignore:
            filters["gitignore"] = create_ignore_filter(patterns.gitignore, ".gitignore")
        return InclusionChecker(filters=filters, match=options.match)

    def _walk(self, root: Path, checker: InclusionChecker) -> Iterator[Tuple[Path, str]]:
        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = Path(dirpath).relative_to(root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"
            kept = []
            for name in sorted(dirnames):
                reason = checker.ignored_by(prefix + name, is_dir=True)
                if reason is not None:
                    logger.debug("[%s] Ignoring directory [%s]: %s", self.name, reason, prefix + name)
                    continue
                kept.append(name)
            dirnames[:] = kept
            for name in sorted(filenames):
                relative = prefix + name
                if not checker(relative):
                    logger.debug("[%s] Ignoring: %s", self.name, relative)
                    continue
                yield Path(dirpath) / name, relative

    async def get_stream(self, source: str, options: Optional[AdapterOptions] = None) -> AsyncIterator[ContentItem]:
        options = options or AdapterOptions()
        root = Path(source).expanduser().resolve()
        logger.info("[%s] Starting stream for directory: %s", self.name, root)
        if not root.is_dir():
            logger.error("[%s] Input directory not found or inaccessible: %s", self.name, root)
            raise AdapterError(f"Input directory not found: {root}")

        checker = self._checker(options)
        included = 0
        for path, relative in self._walk(root, checker):
            included += 1
            logger.debug("[%s] Processing: %s", self.name, relative)
            kind, content, metadata, error = ItemKind.TEXT, None, {"file_path": str(path)}, None
            try:
                kind, content, metadata = await asyncio.to_thread(_load, path)
            except OSError as exc:
                logger.warning("[%s] Error processing file %s: %s", self.name, relative, exc)
                error = exc
            yield ContentItem(
                id=relative,
                source=str(root),
                adapter_name=self.name,
                kind=kind,
                content=content,
                metadata=metadata,
                error=error,
            )
        logger.info("[%s] Finished streaming. Included %d files after filtering.", self.name, included)


def create_filesystem_adapter() -> Adapter:
    """Factory used by the adapter registry and the CLI."""
    return FileSystemAdapter()
