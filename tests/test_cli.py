"""CLI parser and end-to-end behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.source_tree import glob_text
from udoc.cli import _build_parser, main
from udoc.models import GlobSource, OutputMode

SOURCE = """(** * Intro *)
Definition one := S O.
Definition two := S one.
"""


def _write_project(root: Path) -> Path:
    source = root / "theories" / "Lib" / "A.v"
    source.parent.mkdir(parents=True)
    source.write_text(SOURCE, encoding="utf-8")
    (root / "theories" / "Lib" / "A.glob").write_text(
        glob_text(
            "MyLib.Lib.A",
            SOURCE,
            definitions=[("def", "one"), ("def", "two")],
            references=[("one", "MyLib.Lib.A", "def"), ("S", "Coq.Init.Datatypes", "constr")],
        ),
        encoding="utf-8",
    )
    return source


def test_parser_collects_bindings_in_order() -> None:
    args = _build_parser().parse_intermixed_args(["-R", "a", "Foo", "x.v", "-Q", "a/b", "Bar", "y.v"])
    assert args.bindings == [["a", "Foo"], ["a/b", "Bar"]]
    assert args.files == ["x.v", "y.v"]


def test_parser_last_output_flag_wins() -> None:
    parser = _build_parser()
    args = parser.parse_intermixed_args(["--stdout", "-o", "doc/out.html"])
    assert args.out_to == OutputMode.single_file("out.html")
    assert args.output_dir == "doc"

    args = parser.parse_intermixed_args(["-o", "out.html", "--stdout"])
    assert args.out_to == OutputMode.stdout()
    assert args.output_dir == "."


def test_parser_glob_options() -> None:
    parser = _build_parser()
    assert parser.parse_intermixed_args([]).glob is None
    assert parser.parse_intermixed_args(["--no-glob"]).glob == GlobSource.none()
    assert parser.parse_intermixed_args(["--glob-from", "all.glob"]).glob == GlobSource.combined("all.glob")


def test_parser_document_shape_flags() -> None:
    args = _build_parser().parse_intermixed_args(
        ["-s", "-l", "-t", "Title", "--body-only", "--no-index", "--multi-index", "--toc", "--toc-depth", "2"]
    )
    assert args.short_titles and args.light_mode
    assert args.title == "Title"
    assert args.standalone is False
    assert args.index is False
    assert args.split_index is True
    assert args.table_of_contents is True
    assert args.toc_depth == 2


def test_with_header_reenables_standalone() -> None:
    args = _build_parser().parse_intermixed_args(["--body-only", "--with-header", "h.html"])
    assert args.standalone is True
    assert args.header_file == "h.html"


def test_backend_selection_flags() -> None:
    parser = _build_parser()
    assert parser.parse_intermixed_args(["--backend=debug"]).target == "debug"
    assert parser.parse_intermixed_args(["--backend=jscoq", "--html"]).target == "html"
    assert parser.parse_intermixed_args([]).target is None


@pytest.mark.parametrize(
    "argv",
    [
        ["--bogus"],
        ["-o"],
        ["-o", ""],
        ["-o", "out/"],
        ["-R", "only-dir"],
        ["--toc-depth", "deep"],
        ["--backend=latex"],
        ["--tit", "abbreviated"],
    ],
)
def test_usage_errors_exit_with_status_one(argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 1
    assert "usage:" in capsys.readouterr().err


def test_output_option_without_file_name_writes_nothing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "A.v").write_text("Definition a := 0.\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--html", "-o", "out/", "A.v"])

    assert excinfo.value.code == 1
    assert "needs a file name" in capsys.readouterr().err
    assert sorted(path.name for path in tmp_path.rglob("*")) == ["A.v"]


def test_help_exits_with_status_one(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "This is udoc version" in err
    assert "-R DIR NAME" in err


def test_version_exits_with_status_zero(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "This is udoc version" in capsys.readouterr().err


def test_missing_input_writes_nothing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "A.v").write_text("Definition a := 0.\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["A.v", "Missing.v", "-d", "out"])

    assert excinfo.value.code == 1
    assert "Missing.v: no such file" in capsys.readouterr().err
    assert sorted(path.name for path in tmp_path.rglob("*")) == ["A.v"]


def test_no_files_is_a_no_op(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    main([])
    assert list(tmp_path.iterdir()) == []


def test_html_multi_file_end_to_end(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    _write_project(tmp_path)

    main(["-R", "theories", "MyLib", "--html", "--toc", "-d", "out", "theories/Lib/A.v"])

    out = tmp_path / "out"
    page = (out / "MyLib.Lib.A.html").read_text(encoding="utf-8")
    assert '<a class="idref" id="MyLib.Lib.A.one">one</a>' in page
    assert '<a class="idref" href="MyLib.Lib.A.html#MyLib.Lib.A.one">one</a>' in page
    assert "https://coq.inria.fr/stdlib/Coq.Init.Datatypes.html#S" in page
    assert "Library MyLib.Lib.A" in page
    assert (out / "udoc.css").is_file()
    assert not (out / "udoc-jscoq.js").exists()
    assert "MyLib.Lib.A.html#lab1" in (out / "toc.html").read_text(encoding="utf-8")
    assert "MyLib.Lib.A.html#MyLib.Lib.A.two" in (out / "index.html").read_text(encoding="utf-8")


def test_default_backend_is_jscoq(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    _write_project(tmp_path)

    main(["-R", "theories", "MyLib", "theories/Lib/A.v"])

    assert (tmp_path / "udoc-jscoq.js").is_file()
    assert 'class="jscoq-code"' in (tmp_path / "MyLib.Lib.A.html").read_text(encoding="utf-8")


def test_no_glob_renders_without_links(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    _write_project(tmp_path)

    main(["--no-glob", "--backend=debug", "--stdout", "-R", "theories", "MyLib", "theories/Lib/A.v"])

    out = capsys.readouterr().out
    assert "MODULE MyLib.Lib.A title=True" in out
    assert "REF " not in out
    assert "DEF " not in out
    assert not (tmp_path / "MyLib.Lib.A.txt").exists()


def test_missing_companion_glob_is_not_fatal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "B.v").write_text("Definition b := 0.\n", encoding="utf-8")

    main(["--backend=debug", "-o", "single.txt", "B.v"])

    assert "MODULE B" in (tmp_path / "single.txt").read_text(encoding="utf-8")
    assert "links will not be available" in capsys.readouterr().err


def test_config_file_supplies_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    _write_project(tmp_path)
    (tmp_path / ".udoc.yml").write_text(
        "backend: debug\noutput_dir: docs\nmappings:\n  - path: theories\n    name: MyLib\n",
        encoding="utf-8",
    )

    main(["theories/Lib/A.v", "--no-index"])

    assert (tmp_path / "docs" / "MyLib.Lib.A.txt").is_file()


def test_command_line_binding_precedes_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    _write_project(tmp_path)
    (tmp_path / ".udoc.yml").write_text(
        "mappings:\n  - path: theories/Lib\n    name: Other\n",
        encoding="utf-8",
    )

    main(["--backend=debug", "--no-glob", "--no-index", "-R", "theories", "MyLib", "theories/Lib/A.v"])

    assert (tmp_path / "MyLib.Lib.A.txt").is_file()
    assert not (tmp_path / "Other.A.txt").exists()


def test_bad_config_exits_with_status_one(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".udoc.yml").write_text("- not a mapping\n", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 1


def test_log_file_receives_log_records(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "A.v").write_text("Definition a := 0.\n", encoding="utf-8")

    main(["--verbose", "--log-file", "udoc.log", "--backend", "debug", "-d", "out", "A.v"])

    log = (tmp_path / "udoc.log").read_text(encoding="utf-8")
    assert "DEBUG udoc.orchestrator: Rendering 1 file(s) with the debug backend" in log
    assert "WARNING udoc.preload:" in log
    assert "links will not be available" in log
    assert (tmp_path / "out" / "A.txt").is_file()
