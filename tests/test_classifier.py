"""Tests for input file classification."""

from __future__ import annotations

import pytest

from tests._fixtures.source_tree import SourceTreeBuilder
from udoc.classifier import FileClassifier, InputNotFoundError
from udoc.models import SourceUnit
from udoc.paths import PathMapper


def test_classify_tags_file_with_module_name(source_tree: SourceTreeBuilder) -> None:
    source_tree.write({"Lib/A.v": "Definition a := 0.\n"})
    mapper = PathMapper()
    mapper.add_binding(str(source_tree.path()), "Top")
    path = str(source_tree.path("Lib/A.v"))

    unit = FileClassifier(mapper).classify(path)

    assert unit == SourceUnit(file_path=path, module_name="Top.Lib.A")


def test_classify_accepts_any_existing_path(source_tree: SourceTreeBuilder) -> None:
    source_tree.write({"notes.txt": "not a proof script\n"})
    unit = FileClassifier(PathMapper()).classify(str(source_tree.path("notes.txt")))
    assert unit.module_name == "notes"


def test_classify_missing_file_raises(source_tree: SourceTreeBuilder) -> None:
    missing = str(source_tree.path("Missing.v"))
    with pytest.raises(InputNotFoundError) as excinfo:
        FileClassifier(PathMapper()).classify(missing)
    assert isinstance(excinfo.value, FileNotFoundError)
    assert excinfo.value.path == missing
    assert "no such file" in str(excinfo.value)
