"""File directive resolver backed by a local directory."""

from __future__ import annotations

import asyncio
from pathlib import Path

from chatwright.core.types import FileSourceType
from chatwright.errors import ResolverError


class LocalFileResolver:
    """Serve `{{#file source=local ...}}` from `<root>/<bucket>/<id>`."""

    def __init__(self, root: Path) -> None:
        self._root = root.expanduser().resolve()

    def _resolve_path(self, id: str, bucket: str) -> Path:
        path = (self._root / bucket / id).resolve()
        if not path.is_relative_to(self._root):
            raise ResolverError(f"file outside storage root: {bucket}/{id}")
        return path

    async def fetch(self, id: str, source: FileSourceType, bucket: str) -> str | bytes:
        if source is not FileSourceType.LOCAL:
            raise ResolverError(f"unsupported file source: {source.value}")
        path = self._resolve_path(id, bucket)
        if not path.is_file():
            raise ResolverError(f"file not found: {bucket}/{id}")
        data = await asyncio.to_thread(path.read_bytes)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return data
