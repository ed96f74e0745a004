"""Tests for versioned alias synchronisation."""

import os

import pytest

from formula_bump.engine import AliasRename, AliasVersionSync
from formula_bump.errors import StoreError
from formula_bump.formula import Version


@pytest.fixture
def sync():
    return AliasVersionSync()


class TestAliasVersionSync:
    """Tests for AliasVersionSync.propose."""

    def test_major_alias_bumped_at_same_precision(self, sync):
        rename = sync.propose(["foo@2"], Version("3.5.2"))

        assert rename == AliasRename(old="foo@2", new="foo@3")

    def test_two_segment_alias(self, sync):
        rename = sync.propose(["foo@2.1"], Version("2.2.0"))

        assert rename == AliasRename(old="foo@2.1", new="foo@2.2")

    def test_no_rename_when_not_greater(self, sync):
        assert sync.propose(["foo@2.1"], Version("2.0.9")) is None
        assert sync.propose(["foo@2"], Version("2.9")) is None

    def test_first_versioned_alias_wins(self, sync):
        rename = sync.propose(["foo", "foo@1", "foo@1.5"], Version("2.0"))

        assert rename.old == "foo@1"
        assert rename.new == "foo@2"

    def test_no_versioned_alias(self, sync):
        assert sync.propose(["foo", "foo@latest"], Version("2.0")) is None

    def test_non_numeric_version(self, sync):
        assert sync.propose(["foo@2"], Version("HEAD-abc")) is None


class TestAliasRename:
    """Tests for applying and reverting a rename."""

    def test_apply_and_revert(self, tmp_path):
        alias_dir = tmp_path / "Aliases"
        alias_dir.mkdir()
        os.symlink("../Formula/foo.rb", alias_dir / "foo@1")
        rename = AliasRename(old="foo@1", new="foo@2")

        rename.apply(alias_dir)
        assert os.path.lexists(alias_dir / "foo@2")
        assert not os.path.lexists(alias_dir / "foo@1")

        rename.revert(alias_dir)
        assert os.path.lexists(alias_dir / "foo@1")
        assert not os.path.lexists(alias_dir / "foo@2")
        assert os.readlink(alias_dir / "foo@1") == "../Formula/foo.rb"

    def test_revert_without_apply_is_noop(self, tmp_path):
        alias_dir = tmp_path / "Aliases"
        alias_dir.mkdir()
        (alias_dir / "foo@1").write_text("")

        AliasRename(old="foo@1", new="foo@2").revert(alias_dir)

        assert (alias_dir / "foo@1").exists()

    def test_apply_missing_alias(self, tmp_path):
        alias_dir = tmp_path / "Aliases"
        alias_dir.mkdir()

        with pytest.raises(StoreError, match="Unable to rename alias"):
            AliasRename(old="foo@1", new="foo@2").apply(alias_dir)
