"""Base class for output backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from itertools import groupby
from typing import Callable, ClassVar, List, Optional, Sequence, TextIO, Tuple

from ..index import Definition, IndexStore, index_letter
from ..models import RenderOptions, TargetFormat

OutputOpener = Callable[[str], AbstractContextManager[TextIO]]

IndexGroup = Tuple[str, List[Definition]]


@dataclass(frozen=True)
class TocEntry:
    """A module (level 0) or section heading collected while rendering."""

    module: str
    level: int
    title: str
    anchor: str


class Backend(ABC):
    """Contract shared by the document writers.

    The renderer drives the primitive writers (``code``, ``reference``,
    ``section``...) between ``start_document`` and ``end_document``; the
    orchestrator owns stream lifetimes and calls ``appendix`` once after
    per-module documents in multi-file mode.
    """

    target: ClassVar[TargetFormat]
    support_files: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, options: RenderOptions, index: IndexStore) -> None:
        self.options = options
        self.index = index
        self.toc_entries: List[TocEntry] = []
        self._out: Optional[TextIO] = None
        self._module: Optional[str] = None
        self._labels = 0
        self._toc = False
        self._index = False
        self._split_index = False
        self._standalone = True

    @property
    def out(self) -> TextIO:
        if self._out is None:
            raise RuntimeError("No document is open")
        return self._out

    @property
    def extension(self) -> str:
        return self.target.extension

    def write(self, text: str) -> None:
        self.out.write(text)

    # ------------------------------------------------------------------
    # Document lifecycle

    def start_document(
        self,
        out: TextIO,
        *,
        toc: bool,
        index: bool,
        split_index: bool,
        standalone: bool,
    ) -> None:
        self._out = out
        self._toc = toc
        self._index = index
        self._split_index = split_index
        self._standalone = standalone
        self.write_header(standalone)

    def end_document(self) -> None:
        if self._toc:
            self.write_toc(self.toc_entries, local=True)
        if self._index:
            self.write_index(self.index_groups(), local=True)
        self.write_trailer(self._standalone)
        self.out.flush()
        self._out = None

    def appendix(
        self,
        open_output: OutputOpener,
        *,
        toc: bool,
        index: bool,
        split_index: bool,
        standalone: bool,
    ) -> None:
        """Emit the consolidated TOC and index next to per-module documents."""
        if toc:
            with open_output(self.target.filename_for("toc")) as out:
                self.start_document(out, toc=False, index=False, split_index=False, standalone=standalone)
                self.write_toc(self.toc_entries, local=False)
                self.end_document()
        if not index:
            return
        groups = self.index_groups()
        index_name = self.options.index_name
        with open_output(self.target.filename_for(index_name)) as out:
            self.start_document(out, toc=False, index=False, split_index=False, standalone=standalone)
            if split_index:
                letters = [letter for letter, _ in groups]
                self.write_index_letters(
                    [(letter, self.target.filename_for(f"{index_name}_{letter}")) for letter in letters]
                )
            else:
                self.write_index(groups, local=False)
            self.end_document()
        if not split_index:
            return
        for letter, entries in groups:
            with open_output(self.target.filename_for(f"{index_name}_{letter}")) as out:
                self.start_document(out, toc=False, index=False, split_index=False, standalone=standalone)
                self.write_index([(letter, entries)], local=False)
                self.end_document()

    # ------------------------------------------------------------------
    # Calls made by the renderer

    def start_module(self, module: str, *, title: bool) -> None:
        self._module = module
        self.toc_entries.append(TocEntry(module, 0, module, module))
        self.write_module_start(module, title)

    def end_module(self) -> None:
        self.write_module_end()
        self._module = None

    def section(self, level: int, title: str) -> None:
        self._labels += 1
        anchor = f"lab{self._labels}"
        depth = self.options.toc_depth
        if depth is None or level <= depth:
            self.toc_entries.append(TocEntry(self._module or "", level, title, anchor))
        self.write_section(level, title, anchor)

    # ------------------------------------------------------------------
    # Helpers

    def index_groups(self) -> List[IndexGroup]:
        return [
            (letter, list(entries))
            for letter, entries in groupby(
                sorted(self.index.definitions(), key=lambda d: index_letter(d.name)),
                key=lambda d: index_letter(d.name),
            )
        ]

    def href(self, module: str, anchor: Optional[str], *, local: bool) -> str:
        if local:
            return f"#{anchor or module}"
        filename = self.target.filename_for(module)
        return f"{filename}#{anchor}" if anchor else filename

    # ------------------------------------------------------------------
    # Writers implemented per format

    @abstractmethod
    def write_header(self, standalone: bool) -> None:
        """Emit the document preamble."""

    @abstractmethod
    def write_trailer(self, standalone: bool) -> None:
        """Emit the document closing."""

    @abstractmethod
    def write_module_start(self, module: str, title: bool) -> None: ...

    @abstractmethod
    def write_module_end(self) -> None: ...

    @abstractmethod
    def write_section(self, level: int, title: str, anchor: str) -> None: ...

    @abstractmethod
    def doc_text(self, text: str) -> None:
        """Emit a paragraph of prose taken from a documentation comment."""

    @abstractmethod
    def start_code(self) -> None: ...

    @abstractmethod
    def end_code(self) -> None: ...

    @abstractmethod
    def code(self, text: str) -> None: ...

    @abstractmethod
    def reference(self, text: str, url: str) -> None:
        """Emit an identifier linked to ``url``."""

    @abstractmethod
    def definition(self, text: str, anchor: str) -> None:
        """Emit an identifier at its binding site."""

    @abstractmethod
    def write_toc(self, entries: Sequence[TocEntry], *, local: bool) -> None: ...

    @abstractmethod
    def write_index(self, groups: Sequence[IndexGroup], *, local: bool) -> None: ...

    @abstractmethod
    def write_index_letters(self, letters: Sequence[Tuple[str, str]]) -> None:
        """Emit navigation from the main index to per-letter index files."""


__all__ = ["Backend", "IndexGroup", "OutputOpener", "TocEntry"]
