"""CLI entrypoint for udoc."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

from . import __version__
from .classifier import FileClassifier, InputNotFoundError
from .config import ConfigError, UdocConfig, load_config
from .index import DEFAULT_COQLIB_URL, IndexStore
from .logging import configure_logging, get_logger
from .models import (
    DEFAULT_TARGET,
    GlobSource,
    OutputMode,
    RenderOptions,
    SourceUnit,
    TargetFormat,
)
from .orchestrator import DocumentOrchestrator
from .paths import PathMapper
from .preload import IndexPreloader


class _UsageParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _banner() -> None:
    print(f"This is udoc version {__version__}", file=sys.stderr)


class _HelpAction(argparse.Action):
    def __init__(self, option_strings: Sequence[str], dest: str = argparse.SUPPRESS, help: str | None = None) -> None:
        super().__init__(option_strings=option_strings, dest=dest, default=argparse.SUPPRESS, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None) -> None:  # type: ignore[override]
        _banner()
        parser.print_help(sys.stderr)
        parser.exit(1)


class _VersionAction(argparse.Action):
    def __init__(self, option_strings: Sequence[str], dest: str = argparse.SUPPRESS, help: str | None = None) -> None:
        super().__init__(option_strings=option_strings, dest=dest, default=argparse.SUPPRESS, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None) -> None:  # type: ignore[override]
        _banner()
        parser.exit(0)


class _OutputFileAction(argparse.Action):
    """``-o dir/name`` writes ``name`` and moves the output directory to ``dir``."""

    def __call__(self, parser, namespace, values, option_string=None) -> None:  # type: ignore[override]
        name = os.path.basename(values)
        if not name:
            parser.error(f"{option_string} needs a file name, got {values!r}")
        setattr(namespace, "out_to", OutputMode.single_file(name))
        setattr(namespace, "output_dir", os.path.dirname(values) or ".")


class _FrameFileAction(argparse.Action):
    """``--with-header``/``--with-footer`` imply a standalone document."""

    def __call__(self, parser, namespace, values, option_string=None) -> None:  # type: ignore[override]
        setattr(namespace, self.dest, values)
        setattr(namespace, "standalone", True)


def _build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="udoc",
        description="Render annotated proof sources to HTML, jsCoq pages or debug traces.",
        add_help=False,
        allow_abbrev=False,
    )

    target = parser.add_argument_group("output format")
    target.add_argument(
        "--html",
        "-html",
        dest="target",
        action="store_const",
        const="html",
        help="Produce an HTML document.",
    )
    target.add_argument(
        "--backend",
        dest="target",
        choices=[fmt.value for fmt in TargetFormat],
        help="Produce a document with the named backend (default: jscoq).",
    )

    destination = parser.add_argument_group("output destination")
    destination.add_argument(
        "--stdout",
        "-stdout",
        dest="out_to",
        action="store_const",
        const=OutputMode.stdout(),
        help="Write one document to standard output.",
    )
    destination.add_argument(
        "-o",
        "--output",
        dest="out_to",
        action=_OutputFileAction,
        metavar="FILE",
        help="Write one document to FILE.",
    )
    destination.add_argument(
        "-d",
        "--directory",
        dest="output_dir",
        metavar="DIR",
        help="Write output files into DIR.",
    )

    shape = parser.add_argument_group("document shape")
    shape.add_argument("-s", dest="short_titles", action="store_true", help="No titles for files.")
    shape.add_argument("-l", dest="light_mode", action="store_true", help="Light mode: omit proof bodies.")
    shape.add_argument("-t", "-title", "--title", dest="title", metavar="TITLE", help="Title of the document.")
    shape.add_argument(
        "--body-only",
        "--bodyonly",
        "-bodyonly",
        "--no-preamble",
        "--nopreamble",
        "-nopreamble",
        dest="standalone",
        action="store_const",
        const=False,
        help="Suppress the document header and trailer.",
    )
    shape.add_argument(
        "--with-header",
        "-with-header",
        dest="header_file",
        action=_FrameFileAction,
        metavar="FILE",
        help="Use the contents of FILE as document header.",
    )
    shape.add_argument(
        "--with-footer",
        "-with-footer",
        dest="footer_file",
        action=_FrameFileAction,
        metavar="FILE",
        help="Use the contents of FILE as document footer.",
    )

    toc = parser.add_argument_group("index and table of contents")
    toc.add_argument(
        "--no-index",
        "--noindex",
        "-noindex",
        dest="index",
        action="store_false",
        help="Do not output the index.",
    )
    toc.add_argument(
        "--multi-index",
        "-multi-index",
        dest="split_index",
        action="store_true",
        help="Split the index into one file per letter.",
    )
    toc.add_argument("--index", "-index", dest="index_name", metavar="NAME", help="Index name (default: index).")
    toc.add_argument(
        "--toc",
        "-toc",
        "--table-of-contents",
        dest="table_of_contents",
        action="store_true",
        help="Output a table of contents.",
    )
    toc.add_argument(
        "--toc-depth",
        "-toc-depth",
        dest="toc_depth",
        type=int,
        metavar="INT",
        help="Omit table of contents entries for sections below level INT.",
    )

    links = parser.add_argument_group("cross references")
    links.add_argument(
        "--no-glob",
        "-no-glob",
        dest="glob",
        action="store_const",
        const=GlobSource.none(),
        help="Do not use globalization information; no identifier links.",
    )
    links.add_argument(
        "--glob-from",
        "-glob-from",
        dest="glob",
        type=GlobSource.combined,
        metavar="FILE",
        help="Read globalization information from FILE only.",
    )
    links.add_argument(
        "--external",
        "-external",
        dest="externals",
        nargs=2,
        action="append",
        metavar=("URL", "LIB"),
        help="Link identifiers of library LIB to URL.",
    )
    links.add_argument(
        "--no-externals",
        dest="no_externals",
        action="store_true",
        help="No links to external libraries or the standard library.",
    )
    links.add_argument("--coqlib", "-coqlib", dest="coqlib", metavar="URL", help="URL of the standard library.")
    links.add_argument(
        "-R",
        "-Q",
        dest="bindings",
        nargs=2,
        action="append",
        metavar=("DIR", "NAME"),
        help="Map physical directory DIR to logical name NAME.",
    )

    misc = parser.add_argument_group("miscellaneous")
    misc.add_argument(
        "--udoc-path",
        "--udoc_path",
        "--coqlib_path",
        "-coqlib_path",
        dest="assets_dir",
        metavar="DIR",
        help="Directory holding the support files copied next to the output.",
    )
    misc.add_argument("--config", dest="config", metavar="FILE", help="Read defaults from FILE instead of ./.udoc.yml.")
    misc.add_argument("--quiet", dest="quiet", action="store_true", help="Only report warnings and errors.")
    misc.add_argument("--verbose", dest="verbose", action="store_true", help="Increase log verbosity.")
    misc.add_argument("--log-file", dest="log_file", metavar="FILE", help="Also write log records to FILE.")
    misc.add_argument("-h", "-help", "-?", "--help", action=_HelpAction, help="Show this help and exit.")
    misc.add_argument("-V", "-version", "--version", action=_VersionAction, help="Print the version and exit.")

    parser.add_argument("files", nargs="*", metavar="FILE", help="Source files to document.")
    return parser


def _target(args: argparse.Namespace, config: UdocConfig) -> TargetFormat:
    name = args.target or config.backend
    return TargetFormat(name) if name else DEFAULT_TARGET


def _render_options(args: argparse.Namespace, config: UdocConfig) -> RenderOptions:
    return RenderOptions(
        table_of_contents=args.table_of_contents,
        index=args.index,
        split_index=args.split_index,
        standalone=True if args.standalone is None else args.standalone,
        toc_depth=args.toc_depth,
        title=args.title if args.title is not None else (config.title or ""),
        short_titles=args.short_titles,
        light_mode=args.light_mode,
        index_name=args.index_name or config.index_name or "index",
        header_file=args.header_file,
        footer_file=args.footer_file,
    )


def _path_mapper(args: argparse.Namespace, config: UdocConfig) -> PathMapper:
    mapper = PathMapper()
    for physical, logical in args.bindings or []:
        mapper.add_binding(physical, logical)
    for physical, logical in config.mappings:
        mapper.add_binding(physical, logical)
    return mapper


def _index_store(args: argparse.Namespace, config: UdocConfig) -> IndexStore:
    index = IndexStore(
        coqlib_url=args.coqlib or config.coqlib_url or DEFAULT_COQLIB_URL,
        externals_enabled=not args.no_externals,
    )
    for url, logical in args.externals or []:
        index.add_external_library(logical, url)
    for logical, url in config.externals.items():
        index.add_external_library(logical, url)
    index.init_coqlib_library()
    return index


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for udoc."""
    parser = _build_parser()
    args = parser.parse_intermixed_args(argv)

    configure_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        log_file=Path(args.log_file) if args.log_file else None,
    )
    logger = get_logger("cli")

    try:
        config = load_config(Path(args.config) if args.config else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"udoc: {exc}\n")

    classifier = FileClassifier(_path_mapper(args, config))
    try:
        units: List[SourceUnit] = [classifier.classify(path) for path in args.files]
    except InputNotFoundError as exc:
        parser.exit(1, f"udoc: {exc}\n")
    if not units:
        logger.debug("No input files given")
        return

    index = _index_store(args, config)
    glob_source: Optional[GlobSource] = args.glob
    IndexPreloader(index).preload(units, glob_source or GlobSource.per_unit())

    output_dir = args.output_dir or config.output_dir or "."
    orchestrator = DocumentOrchestrator(
        index,
        output_dir=output_dir,
        assets_dir=args.assets_dir or config.assets_dir,
    )
    try:
        orchestrator.produce(
            units,
            _target(args, config),
            args.out_to or OutputMode.multi_file(),
            _render_options(args, config),
        )
    except OSError as exc:
        parser.exit(1, f"udoc: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
