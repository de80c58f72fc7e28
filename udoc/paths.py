"""Mapping of physical source paths to dotted logical module names."""

from __future__ import annotations

import os
from typing import Iterable, List, Optional

from .models import PathBinding


def normalize_path(path: str) -> str:
    """Canonical form shared by bindings and queried files.

    Repeated and trailing separators are collapsed, ``.``/``..`` segments are
    folded and relative paths are anchored at the working directory, so the
    same directory always compares equal however it was spelled.
    """
    return os.path.abspath(os.path.normpath(os.path.expanduser(path)))


class PathMapper:
    """Ordered physical-to-logical bindings, scanned first match first."""

    def __init__(self, bindings: Iterable[PathBinding] = ()) -> None:
        self._bindings: List[PathBinding] = []
        for binding in bindings:
            self.add_binding(binding.physical_path, binding.logical_name)

    @property
    def bindings(self) -> List[PathBinding]:
        return list(self._bindings)

    def add_binding(self, physical_dir: str, logical_name: str) -> PathBinding:
        binding = PathBinding(normalize_path(physical_dir), logical_name)
        self._bindings.append(binding)
        return binding

    def resolve(self, file_path: str) -> str:
        """Return the logical module name for ``file_path``.

        The first binding, in declaration order, whose directory lies on the
        file's upward directory chain wins, even when a later binding is more
        specific. Without a match the extension-less base name is used.
        """
        base, _ = os.path.splitext(file_path)
        dirname, fname = os.path.split(normalize_path(base))
        for binding in self._bindings:
            name = _name_under(binding, dirname, fname)
            if name is not None:
                return name
        return fname


def _name_under(binding: PathBinding, dirname: str, fname: str) -> Optional[str]:
    suffix = [fname]
    current = dirname
    while current != binding.physical_path:
        parent = os.path.dirname(current)
        if parent == current:
            return None
        suffix.insert(0, os.path.basename(current))
        current = parent
    if binding.logical_name:
        suffix.insert(0, binding.logical_name)
    return ".".join(suffix)


__all__ = ["PathMapper", "normalize_path"]
