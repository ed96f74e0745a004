"""Tests for the version spec resolver."""

from unittest.mock import Mock

import pytest

from formula_bump.engine import UpdateRequest, VersionSpecResolver
from formula_bump.engine.resolver import derive_mirror, is_tar_url
from formula_bump.errors import UsageError

from conftest import NEW_SHA


@pytest.fixture
def mock_fetcher(tmp_path):
    fetcher = Mock()
    fetcher.resolve_download_strategy.return_value = "curl"
    fetcher.fetch.return_value = tmp_path / "download"
    fetcher.sha256.return_value = "d" * 64
    return fetcher


@pytest.fixture
def resolver(mock_fetcher):
    return VersionSpecResolver(mock_fetcher)


class TestValidateRequest:
    """Tests for option combination checks."""

    @pytest.mark.parametrize(
        "request_kwargs,message",
        [
            ({"url": "https://x/y-1.0.tar.gz", "tag": "v1", "revision": "abc"}, "mutually exclusive"),
            ({"checksum": NEW_SHA}, "--sha256 requires --url"),
            ({"tag": "v1"}, "--tag requires --revision"),
            ({"revision": "abc"}, "--revision requires --tag"),
        ],
    )
    def test_invalid_combinations(self, request_kwargs, message):
        with pytest.raises(UsageError, match=message):
            VersionSpecResolver.validate_request(UpdateRequest(**request_kwargs))


class TestResolve:
    """Tests for VersionSpecResolver.resolve."""

    def test_url_and_hash(self, resolver, loader, tap, mock_fetcher):
        formula = loader.load(tap / "Formula" / "foo.rb")
        request = UpdateRequest(url="https://example.com/foo-1.3.0.tar.gz", checksum=NEW_SHA)

        update = resolver.resolve(formula, formula.stable, request)

        assert update.is_url_hash
        assert update.url == request.url
        assert update.checksum == NEW_SHA
        assert update.mirror is None
        mock_fetcher.fetch.assert_not_called()

    def test_gnu_mirror_derived(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "hello.rb")
        request = UpdateRequest(url="https://ftp.gnu.org/gnu/hello/hello-2.12.tar.gz", checksum=NEW_SHA)

        update = resolver.resolve(formula, formula.stable, request)

        assert update.mirror == "https://ftpmirror.gnu.org/hello/hello-2.12.tar.gz"

    def test_explicit_mirror_wins(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "hello.rb")
        request = UpdateRequest(
            url="https://ftp.gnu.org/gnu/hello/hello-2.12.tar.gz",
            checksum=NEW_SHA,
            mirror="https://mirror.example/hello-2.12.tar.gz",
        )

        update = resolver.resolve(formula, formula.stable, request)

        assert update.mirror == "https://mirror.example/hello-2.12.tar.gz"

    def test_tag_and_revision(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "baz.rb")
        request = UpdateRequest(tag="v1.5.0", revision="2" * 40)

        update = resolver.resolve(formula, formula.stable, request)

        assert update.style == "tag-revision"
        assert update.tag == "v1.5.0"

    def test_tag_against_url_spec(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "foo.rb")
        request = UpdateRequest(tag="v1.5.0", revision="2" * 40)

        with pytest.raises(UsageError, match="uses a URL and checksum"):
            resolver.resolve(formula, formula.stable, request)

    def test_url_against_tag_spec(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "baz.rb")
        request = UpdateRequest(url="https://example.com/baz-1.5.tar.gz", checksum=NEW_SHA)

        with pytest.raises(UsageError, match="uses a tag and revision"):
            resolver.resolve(formula, formula.stable, request)

    def test_missing_tag_for_tag_spec(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "baz.rb")

        with pytest.raises(UsageError, match="no --tag=/--revision= arguments specified!"):
            resolver.resolve(formula, formula.stable, UpdateRequest())

    def test_missing_url_for_url_spec(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "foo.rb")

        with pytest.raises(UsageError, match="no --url= argument specified!"):
            resolver.resolve(formula, formula.stable, UpdateRequest())

    def test_checksum_computed_from_download(self, resolver, loader, tap, mock_fetcher):
        formula = loader.load(tap / "Formula" / "foo.rb")
        request = UpdateRequest(url="https://example.com/foo-1.3.0.tar.gz")

        update = resolver.resolve(formula, formula.stable, request)

        assert update.checksum == "d" * 64
        mock_fetcher.fetch.assert_called_once_with(request.url, "foo", "1.3.0")
        mock_fetcher.verify_tar_archive.assert_called_once()

    def test_zip_download_skips_tar_check(self, resolver, loader, tap, mock_fetcher):
        formula = loader.load(tap / "Formula" / "foo.rb")
        request = UpdateRequest(url="https://example.com/foo-1.3.0.zip")

        resolver.resolve(formula, formula.stable, request)

        mock_fetcher.verify_tar_archive.assert_not_called()

    def test_forced_version_names_download(self, resolver, loader, tap, mock_fetcher):
        formula = loader.load(tap / "Formula" / "foo.rb")
        request = UpdateRequest(url="https://example.com/download", version="1.3.0")

        resolver.resolve(formula, formula.stable, request)

        mock_fetcher.fetch.assert_called_once_with(request.url, "foo", "1.3.0")

    def test_unknown_version_without_override(self, resolver, loader, tap):
        formula = loader.load(tap / "Formula" / "foo.rb")
        request = UpdateRequest(url="https://example.com/download")

        with pytest.raises(UsageError, match="No --version= argument specified!"):
            resolver.resolve(formula, formula.stable, request)


class TestHelpers:
    """Tests for mirror derivation and tar detection."""

    def test_debian_mirror(self):
        url = "https://mirrors.ocf.berkeley.edu/debian/pool/main/f/foo/foo_1.0.orig.tar.gz"
        assert derive_mirror(url, "stable") == (
            "https://mirrorservice.org/sites/ftp.debian.org/debian/pool/main/f/foo/foo_1.0.orig.tar.gz"
        )

    def test_no_mirror_for_devel(self):
        assert derive_mirror("https://ftp.gnu.org/gnu/hello/hello-2.12.tar.gz", "devel") is None

    def test_no_mirror_for_other_hosts(self):
        assert derive_mirror("https://example.com/foo-1.0.tar.gz", "stable") is None

    def test_is_tar_url(self):
        assert is_tar_url("https://example.com/foo-1.0.tar.gz")
        assert is_tar_url("https://example.com/foo-1.0.tgz")
        assert not is_tar_url("https://example.com/foo-1.0.zip")
