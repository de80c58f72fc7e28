"""Document production: backend selection, output streams and rendering order."""

from __future__ import annotations

import shutil
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO

from .backends import Backend, select_backend
from .index import IndexStore
from .logging import get_logger
from .models import OutputKind, OutputMode, RenderOptions, SourceUnit, TargetFormat
from .pretty import Renderer

DEFAULT_ASSETS_DIR = Path(__file__).parent / "static"


class OutputWriteError(OSError):
    """Raised when an output document cannot be opened or written."""


class AssetCopyError(OSError):
    """Raised when a support file is missing from the assets directory."""


def output_filename(unit: SourceUnit, target: TargetFormat) -> str:
    """Per-unit document name in multi-file mode."""
    return target.filename_for(unit.module_name)


class DocumentOrchestrator:
    """Sequences backend and renderer calls for one generation run."""

    def __init__(
        self,
        index: IndexStore,
        *,
        output_dir: Path | str = ".",
        assets_dir: Path | str | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.index = index
        self.output_dir = Path(output_dir)
        self.assets_dir = Path(assets_dir) if assets_dir is not None else DEFAULT_ASSETS_DIR
        self._stdout = stdout
        self.written: List[Path] = []
        self.logger = get_logger("orchestrator")

    def produce(
        self,
        units: Sequence[SourceUnit],
        target: TargetFormat,
        mode: OutputMode,
        options: RenderOptions,
    ) -> Backend:
        """Render ``units`` in the given order and return the backend used."""
        backend = select_backend(target, options, self.index)
        self.logger.debug("Rendering %d file(s) with the %s backend", len(units), target.value)

        if mode.kind is not OutputKind.STDOUT:
            self.copy_support_files(backend.support_files)

        if mode.kind is OutputKind.MULTI_FILE:
            self._produce_multi(backend, units, options)
        else:
            self._produce_single(backend, units, mode, options)
        return backend

    def _produce_single(
        self,
        backend: Backend,
        units: Sequence[SourceUnit],
        mode: OutputMode,
        options: RenderOptions,
    ) -> None:
        renderer = Renderer(backend, self.index, options, single_document=True)
        if mode.kind is OutputKind.STDOUT:
            stream = self.stdout_stream()
        else:
            if not mode.path:
                raise OutputWriteError("no output file name given")
            stream = self.open_output(mode.path)
        with stream as out:
            backend.start_document(
                out,
                toc=options.table_of_contents,
                index=options.index,
                split_index=options.split_index,
                standalone=options.standalone,
            )
            for unit in units:
                renderer.render_unit(unit)
            backend.end_document()

    def _produce_multi(
        self,
        backend: Backend,
        units: Sequence[SourceUnit],
        options: RenderOptions,
    ) -> None:
        renderer = Renderer(backend, self.index, options)
        for unit in units:
            # Two units with the same module name share a filename; the later one wins.
            with self.open_output(output_filename(unit, backend.target)) as out:
                backend.start_document(
                    out,
                    toc=False,
                    index=False,
                    split_index=False,
                    standalone=options.standalone,
                )
                renderer.render_unit(unit)
                backend.end_document()
        backend.appendix(
            self.open_output,
            toc=options.table_of_contents,
            index=options.index,
            split_index=options.split_index,
            standalone=options.standalone,
        )

    # ------------------------------------------------------------------
    # Streams

    @contextmanager
    def open_output(self, name: str) -> Iterator[TextIO]:
        path = self.output_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = path.open("w", encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(f"cannot write {path}: {exc.strerror or exc}") from exc
        self.logger.debug("Writing %s", path)
        with handle:
            yield handle
        self.written.append(path)

    @contextmanager
    def stdout_stream(self) -> Iterator[TextIO]:
        stream = self._stdout if self._stdout is not None else sys.stdout
        try:
            yield stream
        finally:
            stream.flush()

    # ------------------------------------------------------------------
    # Support files

    def copy_support_files(self, files: Sequence[str]) -> None:
        for name in files:
            try:
                self._copy_support_file(name)
            except AssetCopyError as exc:
                self.logger.warning("%s", exc)

    def _copy_support_file(self, name: str) -> Optional[Path]:
        source = self.assets_dir / name
        if not source.is_file():
            raise AssetCopyError(f"file {source} does not exist")
        destination = self.output_dir / name
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise OutputWriteError(f"cannot write {destination}: {exc.strerror or exc}") from exc
        self.written.append(destination)
        return destination


__all__ = [
    "AssetCopyError",
    "DEFAULT_ASSETS_DIR",
    "DocumentOrchestrator",
    "OutputWriteError",
    "output_filename",
]
