"""Core data models shared across udoc components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TargetFormat(Enum):
    """Output flavour selected on the command line."""

    HTML = "html"
    JSCOQ = "jscoq"
    DEBUG = "debug"

    @property
    def extension(self) -> str:
        if self is TargetFormat.DEBUG:
            return "txt"
        return "html"

    def filename_for(self, module_name: str) -> str:
        """Return the per-module output filename for this format."""
        return f"{module_name}.{self.extension}"


DEFAULT_TARGET = TargetFormat.JSCOQ


class OutputKind(Enum):
    STDOUT = "stdout"
    SINGLE_FILE = "file"
    MULTI_FILE = "multi"


@dataclass(frozen=True)
class OutputMode:
    """Where rendered documents go: stdout, one named file, or one file per unit."""

    kind: OutputKind
    path: Optional[str] = None

    @classmethod
    def stdout(cls) -> "OutputMode":
        return cls(OutputKind.STDOUT)

    @classmethod
    def single_file(cls, path: str) -> "OutputMode":
        return cls(OutputKind.SINGLE_FILE, path)

    @classmethod
    def multi_file(cls) -> "OutputMode":
        return cls(OutputKind.MULTI_FILE)


class GlobKind(Enum):
    NONE = "none"
    PER_UNIT = "per-unit"
    COMBINED = "combined"


@dataclass(frozen=True)
class GlobSource:
    """Where cross-reference metadata is preloaded from."""

    kind: GlobKind
    path: Optional[str] = None

    @classmethod
    def none(cls) -> "GlobSource":
        return cls(GlobKind.NONE)

    @classmethod
    def per_unit(cls) -> "GlobSource":
        return cls(GlobKind.PER_UNIT)

    @classmethod
    def combined(cls, path: str) -> "GlobSource":
        return cls(GlobKind.COMBINED, path)


@dataclass(frozen=True)
class PathBinding:
    """A physical directory bound to a logical module prefix."""

    physical_path: str
    logical_name: str


@dataclass(frozen=True)
class SourceUnit:
    """A validated input file tagged with its logical module name."""

    file_path: str
    module_name: str


@dataclass(frozen=True)
class RenderOptions:
    """Document-shape settings fixed once the command line is parsed."""

    table_of_contents: bool = False
    index: bool = True
    split_index: bool = False
    standalone: bool = True
    toc_depth: Optional[int] = None
    title: str = ""
    short_titles: bool = False
    light_mode: bool = False
    index_name: str = "index"
    header_file: Optional[str] = None
    footer_file: Optional[str] = None


__all__ = [
    "DEFAULT_TARGET",
    "GlobKind",
    "GlobSource",
    "OutputKind",
    "OutputMode",
    "PathBinding",
    "RenderOptions",
    "SourceUnit",
    "TargetFormat",
]
