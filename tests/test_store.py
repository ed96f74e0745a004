"""Tests for formula file storage."""

import os
import stat

import pytest

from formula_bump.errors import StoreError
from formula_bump.formula import FormulaStore, normalize_encoding


class TestNormalizeEncoding:
    """Tests for the canonical text form."""

    def test_plain_utf8(self):
        text, errors = normalize_encoding('url "x"\n'.encode("utf-8"))
        assert text == 'url "x"\n'
        assert errors == []

    def test_bom_and_crlf(self):
        text, errors = normalize_encoding(b'\xef\xbb\xbfurl "x"\r\nsha256 "y"\r\n')
        assert text == 'url "x"\nsha256 "y"\n'
        assert errors == []

    def test_invalid_bytes_reported(self):
        text, errors = normalize_encoding(b'desc "caf\xe9"\n')
        assert len(errors) == 1
        assert "invalid UTF-8" in errors[0]
        assert "�" in text


class TestFormulaStore:
    """Tests for FormulaStore."""

    def test_atomic_write_replaces_content(self, tmp_path):
        path = tmp_path / "foo.rb"
        path.write_text("old\n")
        store = FormulaStore(path)

        store.atomic_write("new\n")

        assert path.read_text() == "new\n"
        # no temporary files left behind
        assert [p.name for p in tmp_path.iterdir()] == ["foo.rb"]

    def test_atomic_write_keeps_mode(self, tmp_path):
        path = tmp_path / "foo.rb"
        path.write_text("old\n")
        os.chmod(path, 0o600)

        FormulaStore(path).atomic_write("new\n")

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_backup_and_restore_byte_identical(self, tmp_path):
        path = tmp_path / "foo.rb"
        original = b'\xef\xbb\xbfclass Foo < Formula\r\nend\r\n'
        path.write_bytes(original)
        store = FormulaStore(path)

        store.backup()
        store.atomic_write("class Foo < Formula\nend\n")
        assert store.restore() is True

        assert path.read_bytes() == original

    def test_backup_keeps_first_capture(self, tmp_path):
        path = tmp_path / "foo.rb"
        path.write_text("first\n")
        store = FormulaStore(path)

        store.backup()
        path.write_text("second\n")
        store.backup()
        store.restore()

        assert path.read_text() == "first\n"

    def test_restore_consumes_backup(self, tmp_path):
        path = tmp_path / "foo.rb"
        path.write_text("first\n")
        store = FormulaStore(path)
        store.backup()

        assert store.restore() is True
        assert not store.has_backup
        assert store.restore() is False

    def test_restore_without_backup(self, tmp_path):
        path = tmp_path / "foo.rb"
        path.write_text("first\n")
        store = FormulaStore(path)

        assert store.restore() is False
        assert path.read_text() == "first\n"

    def test_discard_backup(self, tmp_path):
        path = tmp_path / "foo.rb"
        path.write_text("first\n")
        store = FormulaStore(path)
        store.backup()

        store.discard_backup()

        assert not store.has_backup

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(StoreError, match="Unable to read"):
            FormulaStore(tmp_path / "missing.rb").read()

    def test_write_into_missing_directory(self, tmp_path):
        store = FormulaStore(tmp_path / "Formula" / "foo.rb")

        with pytest.raises(StoreError, match="Unable to write"):
            store.atomic_write("new\n")

    def test_failed_replace_leaves_no_temporary_file(self, tmp_path):
        # a directory in the formula's place makes os.replace fail
        path = tmp_path / "foo.rb"
        path.mkdir()

        with pytest.raises(StoreError):
            FormulaStore(path).atomic_write("new\n")

        assert [p.name for p in tmp_path.iterdir()] == ["foo.rb"]
