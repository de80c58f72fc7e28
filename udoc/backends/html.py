"""HTML document writer."""

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Optional, Sequence, Tuple

from ..models import TargetFormat
from .base import Backend, IndexGroup, TocEntry

_TEMPLATE_PATH = Path(__file__).parent.parent / "templates" / "page.html"
_BODY_MARKER = "{body}"


def _page_shell() -> Tuple[str, str]:
    """Split the page template around its body into header and trailer."""
    template = _TEMPLATE_PATH.read_text(encoding="utf-8")
    header, _, trailer = template.partition(_BODY_MARKER)
    return header, trailer


class HtmlBackend(Backend):
    """Plain HTML pages styled by ``udoc.css``."""

    target = TargetFormat.HTML
    support_files = ("udoc.css",)

    def head_extra(self) -> str:
        return '<link href="udoc.css" rel="stylesheet" type="text/css"/>\n'

    def write_header(self, standalone: bool) -> None:
        if not standalone:
            return
        custom = _read_optional(self.options.header_file)
        if custom is not None:
            self.write(custom)
        else:
            header, _ = _page_shell()
            self.write(
                header.format(
                    title=escape(self.options.title or "udoc"),
                    head_extra=self.head_extra(),
                )
            )
        self.write('<div id="main">\n')

    def write_trailer(self, standalone: bool) -> None:
        if not standalone:
            return
        self.write("</div>\n")
        custom = _read_optional(self.options.footer_file)
        if custom is None:
            _, custom = _page_shell()
        self.write(custom)

    def write_module_start(self, module: str, title: bool) -> None:
        self.write(f'<div class="module" id="{escape(module)}">\n')
        if title:
            self.write(f'<h1 class="libtitle">Library {escape(module)}</h1>\n')

    def write_module_end(self) -> None:
        self.write("</div>\n")

    def write_section(self, level: int, title: str, anchor: str) -> None:
        tag = f"h{min(level + 1, 6)}"
        self.write(f'<{tag} class="section" id="{anchor}">{escape(title)}</{tag}>\n')

    def doc_text(self, text: str) -> None:
        self.write(f'<div class="doc">\n<p>{escape(text)}</p>\n</div>\n')

    def start_code(self) -> None:
        self.write('<div class="code"><pre>')

    def end_code(self) -> None:
        self.write("</pre></div>\n")

    def code(self, text: str) -> None:
        self.write(escape(text, quote=False))

    def reference(self, text: str, url: str) -> None:
        self.write(f'<a class="idref" href="{escape(url)}">{escape(text, quote=False)}</a>')

    def definition(self, text: str, anchor: str) -> None:
        self.write(f'<a class="idref" id="{escape(anchor)}">{escape(text, quote=False)}</a>')

    def write_toc(self, entries: Sequence[TocEntry], *, local: bool) -> None:
        self.write('<div id="toc">\n<h1>Table of contents</h1>\n<ul class="toc">\n')
        for entry in entries:
            if entry.level == 0:
                href = self.href(entry.module, None, local=local)
                self.write(f'<li class="toclib"><a href="{escape(href)}">Library {escape(entry.title)}</a></li>\n')
            else:
                href = self.href(entry.module, entry.anchor, local=local)
                self.write(
                    f'<li class="tocsec{entry.level}"><a href="{escape(href)}">{escape(entry.title)}</a></li>\n'
                )
        self.write("</ul>\n</div>\n")

    def write_index(self, groups: Sequence[IndexGroup], *, local: bool) -> None:
        self.write('<div id="index">\n<h1>Global index</h1>\n')
        for letter, entries in groups:
            self.write(f'<h2 id="index_{letter}">{letter}</h2>\n<ul class="index">\n')
            for entry in entries:
                href = self.href(entry.module, entry.anchor, local=local)
                self.write(
                    f'<li><a href="{escape(href)}">{escape(entry.name)}</a> '
                    f'<span class="kind">[{escape(entry.kind)}, in {escape(entry.module)}]</span></li>\n'
                )
            self.write("</ul>\n")
        self.write("</div>\n")

    def write_index_letters(self, letters: Sequence[Tuple[str, str]]) -> None:
        self.write('<div id="index">\n<h1>Global index</h1>\n<p class="letters">\n')
        for letter, filename in letters:
            self.write(f'<a href="{escape(filename)}">{letter}</a>\n')
        self.write("</p>\n</div>\n")


def _read_optional(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return Path(path).read_text(encoding="utf-8")


__all__ = ["HtmlBackend"]
