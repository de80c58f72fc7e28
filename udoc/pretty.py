"""Rendering of one annotated source file through a backend."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Tuple

from .backends import Backend
from .index import IndexStore
from .models import RenderOptions, SourceUnit

# (** ... *) but not (**) or (*** decorations
_DOC_COMMENT = re.compile(rb"\(\*\*(?![*)])(.*?)\*\)", re.S)
_PROOF = re.compile(rb"\bProof\b.*?\b(?:Qed|Defined|Admitted|Abort)\s*\.", re.S)
_IDENT = re.compile(rb"(?<![A-Za-z0-9_'])[A-Za-z_][A-Za-z0-9_']*(?:\.[A-Za-z_][A-Za-z0-9_']*)*")
_HEADING = re.compile(r"^(\*{1,4})\s+(.+?)\s*$")
_BLANK_LINES = re.compile(r"\n\s*\n")

_WHITESPACE = b" \t\r\n"


def _decode(chunk: bytes) -> str:
    return chunk.decode("utf-8", errors="replace")


class Renderer:
    """Splits a source file into prose and code and drives the backend.

    Positions are byte offsets into the file, matching the offsets recorded
    in glob files.
    """

    def __init__(
        self,
        backend: Backend,
        index: IndexStore,
        options: RenderOptions,
        *,
        single_document: bool = False,
    ) -> None:
        self.backend = backend
        self.index = index
        self.options = options
        self.single_document = single_document

    def render_unit(self, unit: SourceUnit) -> None:
        data = Path(unit.file_path).read_bytes()
        self.backend.start_module(unit.module_name, title=not self.options.short_titles)
        position = 0
        for match in _DOC_COMMENT.finditer(data):
            self._code(unit.module_name, data, position, match.start())
            self._doc(match.group(1))
            position = match.end()
        self._code(unit.module_name, data, position, len(data))
        self.backend.end_module()

    def _code(self, module: str, data: bytes, start: int, end: int) -> None:
        for span_start, span_end in self._code_spans(data, start, end):
            while span_start < span_end and data[span_start] in b"\r\n":
                span_start += 1
            while span_end > span_start and data[span_end - 1] in _WHITESPACE:
                span_end -= 1
            if not data[span_start:span_end].strip():
                continue
            self.backend.start_code()
            cursor = span_start
            for match in _IDENT.finditer(data, span_start, span_end):
                if match.start() > cursor:
                    self.backend.code(_decode(data[cursor:match.start()]))
                self._identifier(module, _decode(match.group(0)), match.start())
                cursor = match.end()
            if cursor < span_end:
                self.backend.code(_decode(data[cursor:span_end]))
            self.backend.end_code()

    def _code_spans(self, data: bytes, start: int, end: int) -> List[Tuple[int, int]]:
        if not self.options.light_mode:
            return [(start, end)]
        spans: List[Tuple[int, int]] = []
        cursor = start
        for proof in _PROOF.finditer(data, start, end):
            spans.append((cursor, proof.start()))
            cursor = proof.end()
        spans.append((cursor, end))
        return spans

    def _identifier(self, module: str, text: str, position: int) -> None:
        definition = self.index.definition_at(module, position)
        if definition is not None:
            self.backend.definition(text, definition.anchor)
            return
        reference = self.index.reference_at(module, position)
        if reference is not None:
            url = self.index.url_for(reference, self.backend.extension, local=self.single_document)
            if url is not None:
                self.backend.reference(text, url)
                return
        self.backend.code(text)

    def _doc(self, body: bytes) -> None:
        for block in _BLANK_LINES.split(_decode(body)):
            lines = [line.strip() for line in block.strip().splitlines()]
            if not lines:
                continue
            heading = _HEADING.match(lines[0])
            if heading:
                self.backend.section(len(heading.group(1)), heading.group(2))
                lines = lines[1:]
            text = " ".join(line for line in lines if line)
            if text:
                self.backend.doc_text(text)


__all__ = ["Renderer"]
