"""Cross-reference index populated from glob files before rendering."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .logging import get_logger

DEFAULT_COQLIB_URL = "https://coq.inria.fr/stdlib/"
STDLIB_ROOT = "Coq"

_NO_SECTION = "<>"


class MetadataReadError(OSError):
    """Raised when a glob file cannot be read."""


@dataclass(frozen=True)
class Reference:
    """Use of an identifier pointing at a definition in ``target_module``."""

    target_module: str
    name: str
    kind: str
    section: str = ""

    @property
    def anchor(self) -> str:
        return qualified_anchor(self.target_module, self.section, self.name)


@dataclass(frozen=True)
class Definition:
    """Binding site of an identifier inside ``module``."""

    module: str
    name: str
    kind: str
    position: int
    section: str = ""

    @property
    def anchor(self) -> str:
        return qualified_anchor(self.module, self.section, self.name)


class IndexStore:
    """Process-wide lookup shared by the preloader and the renderer.

    Entries are keyed by (module, byte offset); merging the same glob data
    twice overwrites rather than appends.
    """

    def __init__(
        self,
        *,
        coqlib_url: str = DEFAULT_COQLIB_URL,
        externals_enabled: bool = True,
    ) -> None:
        self.coqlib_url = coqlib_url
        self.externals_enabled = externals_enabled
        self._modules: Dict[str, None] = {}
        self._references: Dict[str, Dict[int, Reference]] = {}
        self._definitions: Dict[str, Dict[int, Definition]] = {}
        self._externals: List[Tuple[str, str]] = []
        self.logger = get_logger("index")

    # ------------------------------------------------------------------
    # Registry

    def add_module(self, module_name: str) -> None:
        self._modules[module_name] = None

    def has_module(self, module_name: str) -> bool:
        return module_name in self._modules

    @property
    def modules(self) -> List[str]:
        return list(self._modules)

    def add_external_library(self, logical_name: str, url: str) -> None:
        self._externals.append((logical_name, url))

    def init_coqlib_library(self) -> None:
        """Route references into the standard library to ``coqlib_url``."""
        self.add_external_library(STDLIB_ROOT, self.coqlib_url)

    # ------------------------------------------------------------------
    # Glob ingestion

    def read_glob(self, source_path: Optional[str], glob_path: str) -> None:
        """Merge the entries of ``glob_path`` into the store.

        ``source_path`` is the file the glob was produced from, when known; it
        is used only to detect stale digests.
        """
        try:
            text = Path(glob_path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise MetadataReadError(f"{glob_path}: {exc.strerror or exc}") from exc
        self.merge_glob_lines(text.splitlines(), source_path=source_path, origin=glob_path)

    def merge_glob_lines(
        self,
        lines: Iterable[str],
        *,
        source_path: Optional[str] = None,
        origin: str = "<glob>",
    ) -> None:
        current: Optional[str] = None
        for lineno, raw in enumerate(lines, start=1):
            line = raw.rstrip("\n")
            if not line.strip():
                continue
            if line.startswith("DIGEST"):
                self._check_digest(line, source_path, origin)
            elif line.startswith("F"):
                current = line[1:].strip()
            elif current is None:
                self.logger.debug("%s:%d: entry before module header ignored", origin, lineno)
            elif line.startswith("R"):
                self._merge_reference(current, line[1:], origin, lineno)
            else:
                self._merge_definition(current, line, origin, lineno)

    def _merge_reference(self, module: str, body: str, origin: str, lineno: int) -> None:
        parts = body.split()
        if len(parts) < 5:
            self.logger.debug("%s:%d: malformed reference skipped", origin, lineno)
            return
        position = _start_offset(parts[0])
        if position is None:
            self.logger.debug("%s:%d: bad position %r", origin, lineno, parts[0])
            return
        target, section, name, kind = parts[1], parts[2], parts[3], parts[4]
        self._references.setdefault(module, {})[position] = Reference(
            target, name, kind, _section_path(section)
        )

    def _merge_definition(self, module: str, line: str, origin: str, lineno: int) -> None:
        parts = line.split()
        if len(parts) < 4:
            self.logger.debug("%s:%d: malformed definition skipped", origin, lineno)
            return
        kind, location, section, name = parts[0], parts[1], parts[2], parts[3]
        position = _start_offset(location)
        if position is None:
            self.logger.debug("%s:%d: bad position %r", origin, lineno, location)
            return
        self._definitions.setdefault(module, {})[position] = Definition(
            module, name, kind, position, _section_path(section)
        )

    def _check_digest(self, line: str, source_path: Optional[str], origin: str) -> None:
        parts = line.split()
        if source_path is None or len(parts) < 2 or parts[1] == "NO":
            return
        try:
            actual = hashlib.md5(Path(source_path).read_bytes()).hexdigest()
        except OSError:
            return
        if actual != parts[1].lower():
            self.logger.warning("%s is not consistent with %s (glob file may be out of date)", origin, source_path)

    # ------------------------------------------------------------------
    # Lookups used while rendering

    def reference_at(self, module: str, position: int) -> Optional[Reference]:
        return self._references.get(module, {}).get(position)

    def definition_at(self, module: str, position: int) -> Optional[Definition]:
        return self._definitions.get(module, {}).get(position)

    def url_for(self, reference: Reference, extension: str, *, local: bool = False) -> Optional[str]:
        """Return the hyperlink target of ``reference`` or None when unknown.

        ``local`` makes links into registered modules plain anchors, for
        documents that contain every module.
        """
        module = reference.target_module
        if module in self._modules:
            if local:
                return f"#{reference.anchor}"
            return f"{module}.{extension}#{reference.anchor}"
        if not self.externals_enabled:
            return None
        for logical_name, url in self._externals:
            if module == logical_name or module.startswith(logical_name + "."):
                return f"{url.rstrip('/')}/{module}.html#{reference.name}"
        return None

    def definitions(self) -> List[Definition]:
        """Definitions of registered modules, ordered for the global index."""
        entries = [
            definition
            for module in self._modules
            for definition in self._definitions.get(module, {}).values()
        ]
        entries.sort(key=lambda d: (d.name.lower(), d.name, d.module, d.position))
        return entries


def _section_path(section: str) -> str:
    return "" if section == _NO_SECTION else section


def qualified_anchor(module: str, section: str, name: str) -> str:
    """Anchor id of a definition, unique across every module of a document."""
    return ".".join(part for part in (module, section, name) if part)


def _start_offset(location: str) -> Optional[int]:
    try:
        return int(location.split(":", 1)[0])
    except ValueError:
        return None


def index_letter(name: str) -> str:
    """Bucket used by the global index: upper-cased initial or ``_``."""
    initial = name[:1]
    return initial.upper() if initial.isalpha() else "_"


__all__ = [
    "DEFAULT_COQLIB_URL",
    "Definition",
    "IndexStore",
    "MetadataReadError",
    "Reference",
    "index_letter",
    "qualified_anchor",
]
