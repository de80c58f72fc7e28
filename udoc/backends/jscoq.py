"""HTML pages whose code blocks are made interactive by jsCoq."""

from __future__ import annotations

from ..models import TargetFormat
from .html import HtmlBackend

_JSCOQ_LOADER = """<script src="udoc-jscoq.js" type="text/javascript"></script>
"""


class JsCoqBackend(HtmlBackend):
    """HTML output with code wrapped for the jsCoq loader script."""

    target = TargetFormat.JSCOQ
    support_files = ("udoc.css", "udoc-jscoq.js")

    def head_extra(self) -> str:
        return super().head_extra() + _JSCOQ_LOADER

    def start_code(self) -> None:
        self.write('<div class="code"><pre class="jscoq-code">')

    def write_trailer(self, standalone: bool) -> None:
        if standalone:
            self.write('<script type="text/javascript">udocJsCoqInit();</script>\n')
        super().write_trailer(standalone)


__all__ = ["JsCoqBackend"]
