"""Output backends and their selection."""

from __future__ import annotations

from typing import Callable, Dict

from ..index import IndexStore
from ..models import RenderOptions, TargetFormat
from .base import Backend, OutputOpener, TocEntry
from .debug import DebugBackend
from .html import HtmlBackend
from .jscoq import JsCoqBackend

_BUILTIN_FACTORIES: Dict[TargetFormat, Callable[[RenderOptions, IndexStore], Backend]] = {
    TargetFormat.HTML: HtmlBackend,
    TargetFormat.JSCOQ: JsCoqBackend,
    TargetFormat.DEBUG: DebugBackend,
}


def select_backend(target: TargetFormat, options: RenderOptions, index: IndexStore) -> Backend:
    """Return the backend instance producing ``target`` documents."""
    try:
        factory = _BUILTIN_FACTORIES[target]
    except KeyError as exc:
        raise ValueError(f"Unknown target format: {target!r}") from exc
    return factory(options, index)


__all__ = [
    "Backend",
    "DebugBackend",
    "HtmlBackend",
    "JsCoqBackend",
    "OutputOpener",
    "TocEntry",
    "select_backend",
]
