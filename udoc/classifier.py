"""Validation of input file arguments."""

from __future__ import annotations

import os

from .models import SourceUnit
from .paths import PathMapper


class InputNotFoundError(FileNotFoundError):
    """Raised when a named input file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"{path}: no such file")
        self.path = path


class FileClassifier:
    """Turns path arguments into source units named through a PathMapper."""

    def __init__(self, mapper: PathMapper) -> None:
        self.mapper = mapper

    def classify(self, path: str) -> SourceUnit:
        if not os.path.exists(path):
            raise InputNotFoundError(path)
        return SourceUnit(file_path=path, module_name=self.mapper.resolve(path))


__all__ = ["FileClassifier", "InputNotFoundError"]
