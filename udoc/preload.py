"""Index preloading ahead of rendering."""

from __future__ import annotations

import os
from typing import Optional, Sequence

from .index import IndexStore, MetadataReadError
from .logging import get_logger
from .models import GlobKind, GlobSource, SourceUnit

GLOB_EXTENSION = ".glob"


def companion_glob_path(unit: SourceUnit) -> str:
    """Return the glob file expected next to ``unit``'s source."""
    base, _ = os.path.splitext(unit.file_path)
    return base + GLOB_EXTENSION


class IndexPreloader:
    """Feeds glob metadata and the module registry into an IndexStore."""

    def __init__(self, index: IndexStore) -> None:
        self.index = index
        self.logger = get_logger("preload")

    def preload(self, units: Sequence[SourceUnit], source: GlobSource) -> None:
        if source.kind is GlobKind.PER_UNIT:
            for unit in units:
                self._read(unit.file_path, companion_glob_path(unit))
        elif source.kind is GlobKind.COMBINED and source.path is not None:
            self._read(None, source.path)
        else:
            self.logger.debug("Glob loading disabled; identifiers will not be linked")

        for unit in units:
            self.index.add_module(unit.module_name)

    def _read(self, source_path: Optional[str], glob_path: str) -> None:
        self.logger.debug("Reading glob file %s", glob_path)
        try:
            self.index.read_glob(source_path, glob_path)
        except MetadataReadError as exc:
            self.logger.warning("%s (links will not be available)", exc)


__all__ = ["IndexPreloader", "companion_glob_path"]
