"""Line-per-event trace of everything the renderer emits."""

from __future__ import annotations

from typing import Sequence, Tuple

from ..models import TargetFormat
from .base import Backend, IndexGroup, TocEntry


class DebugBackend(Backend):
    target = TargetFormat.DEBUG

    def _event(self, *parts: object) -> None:
        self.write(" ".join(str(part) for part in parts) + "\n")

    def write_header(self, standalone: bool) -> None:
        self._event(
            "DOCUMENT",
            f"toc={self._toc}",
            f"index={self._index}",
            f"split_index={self._split_index}",
            f"standalone={standalone}",
        )

    def write_trailer(self, standalone: bool) -> None:
        self._event("END-DOCUMENT")

    def write_module_start(self, module: str, title: bool) -> None:
        self._event("MODULE", module, f"title={title}")

    def write_module_end(self) -> None:
        self._event("END-MODULE")

    def write_section(self, level: int, title: str, anchor: str) -> None:
        self._event("SECTION", level, anchor, repr(title))

    def doc_text(self, text: str) -> None:
        self._event("DOC", repr(text))

    def start_code(self) -> None:
        self._event("CODE")

    def end_code(self) -> None:
        self._event("END-CODE")

    def code(self, text: str) -> None:
        self._event("TEXT", repr(text))

    def reference(self, text: str, url: str) -> None:
        self._event("REF", text, url)

    def definition(self, text: str, anchor: str) -> None:
        self._event("DEF", text, anchor)

    def write_toc(self, entries: Sequence[TocEntry], *, local: bool) -> None:
        for entry in entries:
            href = self.href(entry.module, entry.anchor if entry.level else None, local=local)
            self._event("TOC", entry.level, href, repr(entry.title))

    def write_index(self, groups: Sequence[IndexGroup], *, local: bool) -> None:
        for letter, entries in groups:
            for entry in entries:
                self._event("INDEX", letter, entry.name, entry.kind, self.href(entry.module, entry.anchor, local=local))

    def write_index_letters(self, letters: Sequence[Tuple[str, str]]) -> None:
        for letter, filename in letters:
            self._event("INDEX-LETTER", letter, filename)


__all__ = ["DebugBackend"]
