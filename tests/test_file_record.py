"""Tests for FileRecord normalization – defaults, aliases, duplicate ids."""
import os
import sys
import warnings
from datetime import datetime

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import DuplicateFileIdWarning
from file_record import (FileRecord, derive_extension, format_size, is_draggable,
                         is_droppable, is_openable, is_selectable, normalize_files)


class TestFileRecordDefaults:
    def test_extension_derived_from_name(self):
        f = FileRecord.create("1", "archive.tar.gz")
        assert f.extension == "gz"

    def test_extension_override(self):
        f = FileRecord.create("1", "Makefile", extension="make")
        assert f.extension == "make"

    def test_directory_has_no_extension(self):
        f = FileRecord.create("1", "photos.2024", is_directory=True)
        assert f.extension == ""

    def test_dotfile_is_hidden_without_extension(self):
        f = FileRecord.create("1", ".bashrc")
        assert f.is_hidden
        assert f.extension == ""

    def test_directory_droppable_by_default(self):
        assert FileRecord.create("d", "dir", is_directory=True).droppable
        assert not FileRecord.create("f", "file.txt").droppable

    def test_files_and_dirs_draggable_by_default(self):
        assert FileRecord.create("d", "dir", is_directory=True).draggable
        assert FileRecord.create("f", "file.txt").draggable

    def test_epoch_modified_becomes_datetime(self):
        f = FileRecord.create("1", "a.txt", modified=0)
        assert isinstance(f.modified, datetime)

    def test_missing_id_rejected(self):
        with pytest.raises(ValueError):
            FileRecord.create("", "a.txt")

    def test_records_are_frozen(self):
        f = FileRecord.create("1", "a.txt")
        with pytest.raises(AttributeError):
            f.name = "b.txt"

    def test_extra_defaults_to_empty(self):
        assert FileRecord("1", "a.txt").extra == {}
        assert FileRecord.create("1", "a.txt").extra == {}


class TestFromMapping:
    def test_camel_case_aliases(self):
        f = FileRecord.from_mapping({"id": "x", "name": "pics", "isDir": True,
                                     "childrenCount": 3, "thumbnailUrl": "t.png"})
        assert f.is_directory
        assert f.child_count == 3
        assert f.thumbnail_url == "t.png"

    def test_unknown_keys_go_to_extra(self):
        f = FileRecord.from_mapping({"id": "x", "name": "a.txt", "owner": "kim"})
        assert f.extra["owner"] == "kim"
        assert not hasattr(f, "owner")

    def test_extra_is_read_only(self):
        f = FileRecord.from_mapping({"id": "x", "name": "a.txt", "owner": "kim"})
        with pytest.raises(TypeError):
            f.extra["owner"] = "lee"

    def test_name_required(self):
        with pytest.raises(ValueError):
            FileRecord.from_mapping({"id": "x"})


class TestNormalizeFiles:
    def test_placeholders_kept(self):
        result = normalize_files([None, {"id": "a", "name": "a.txt"}, None])
        assert result.files[0] is None
        assert result.files[2] is None
        assert list(result.file_map) == ["a"]

    def test_unsupported_entry(self):
        with pytest.raises(TypeError):
            normalize_files([42])

    def test_duplicates_reported_not_raised(self):
        with pytest.warns(DuplicateFileIdWarning):
            result = normalize_files([
                {"id": "a", "name": "x.txt"},
                {"id": "a", "name": "y.txt"},
            ])
        assert result.duplicate_ids == ("a",)
        assert len(result.files) == 2

    def test_first_occurrence_wins(self):
        with pytest.warns(DuplicateFileIdWarning):
            result = normalize_files([
                {"id": "a", "name": "x.txt"},
                {"id": "a", "name": "y.txt"},
            ])
        assert result.file_map["a"].name == "x.txt"

    def test_unique_ids_no_warning(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = normalize_files([{"id": "a", "name": "a"}, {"id": "b", "name": "b"}])
        assert result.duplicate_ids == ()

    def test_none_input(self):
        assert normalize_files(None).files == ()


class TestCapabilities:
    def test_placeholder_never_actionable(self):
        assert not is_selectable(None)
        assert not is_openable(None)
        assert not is_draggable(None)
        assert not is_droppable(None)

    def test_flags_respected(self):
        f = FileRecord.create("1", "a.txt", selectable=False, openable=False)
        assert not is_selectable(f)
        assert not is_openable(f)


def test_derive_extension():
    assert derive_extension("a.b.c") == "c"
    assert derive_extension("noext") == ""


def test_format_size():
    assert format_size(0) == "0 B"
    assert format_size(1024) == "1.0 KB"
    assert format_size(None) == ""
    assert format_size(-5) == "0 B"
