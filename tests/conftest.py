"""Pytest configuration and shared fixtures."""

import os
from pathlib import Path
from unittest.mock import Mock

import pytest

from formula_bump.config import Settings
from formula_bump.formula import FormulaLoader
from formula_bump.github import ForkInfo

OLD_SHA = "a" * 64
NEW_SHA = "b" * 64
BOTTLE_SHA = "c" * 64

STABLE_FORMULA = f'''class Foo < Formula
  desc "Example tool"
  homepage "https://example.com/foo"
  url "https://example.com/foo-1.2.3.tar.gz"
  sha256 "{OLD_SHA}"
  revision 2

  bottle do
    sha256 "{BOTTLE_SHA}" => :sierra
  end

  depends_on "bar"

  def install
    system "make", "install"
  end
end
'''

MIRRORED_FORMULA = f'''class Hello < Formula
  desc "Program providing model for GNU coding standards and practices"
  homepage "https://www.gnu.org/software/hello/"
  url "https://ftp.gnu.org/gnu/hello/hello-2.10.tar.gz"
  mirror "https://ftpmirror.gnu.org/hello/hello-2.10.tar.gz"
  sha256 "{OLD_SHA}"

  def install
    system "make", "install"
  end
end
'''

TAG_FORMULA = '''class Baz < Formula
  desc "Tool built from a git tag"
  homepage "https://github.com/example/baz"
  url "https://github.com/example/baz.git",
      tag:      "v1.4.0",
      revision: "1111111111111111111111111111111111111111"

  def install
    system "make"
  end
end
'''

DEVEL_FORMULA = f'''class Qux < Formula
  desc "Tool with a development release"
  homepage "https://example.com/qux"
  revision 1

  stable do
    url "https://example.com/qux-2.0.tar.gz"
    sha256 "{OLD_SHA}"
  end

  devel do
    url "https://example.com/qux-2.1-beta.tar.gz"
    sha256 "{BOTTLE_SHA}"
    version "2.1-beta1"
  end

  def install
    system "make"
  end
end
'''


@pytest.fixture
def tap(tmp_path: Path) -> Path:
    """A tap directory with Formula/ and Aliases/ and a few formulae."""
    formula_dir = tmp_path / "Formula"
    alias_dir = tmp_path / "Aliases"
    formula_dir.mkdir()
    alias_dir.mkdir()
    (formula_dir / "foo.rb").write_text(STABLE_FORMULA)
    (formula_dir / "hello.rb").write_text(MIRRORED_FORMULA)
    (formula_dir / "baz.rb").write_text(TAG_FORMULA)
    (formula_dir / "qux.rb").write_text(DEVEL_FORMULA)
    os.symlink("../Formula/foo.rb", alias_dir / "foo@1")
    return tmp_path


@pytest.fixture
def loader(tap: Path) -> FormulaLoader:
    return FormulaLoader(tap)


@pytest.fixture
def mock_settings(tap: Path, tmp_path: Path) -> Settings:
    """Create settings with test values."""
    return Settings(
        github_api_url="https://api.github.test",
        github_token="test-token",
        tap_path=tap,
        base_branch="master",
        cache_dir=tmp_path / "cache",
        fork_poll_interval_seconds=0.0,
        fork_poll_timeout_seconds=1.0,
        audit_command=["brew", "audit"],
        user_path=None,
        browser=None,
    )


@pytest.fixture
def mock_github():
    """A mocked GitHub client with no open pull requests."""
    client = Mock()
    client.search_open_pull_requests.return_value = []
    client.create_pull_request.return_value = "https://github.com/owner/tap/pull/42"
    return client


@pytest.fixture
def mock_forks():
    forks = Mock()
    forks.fork.return_value = ForkInfo(
        clone_url="https://github.com/someone/tap.git",
        ssh_url="git@github.com:someone/tap.git",
        owner="someone",
    )
    return forks


@pytest.fixture
def mock_git():
    git = Mock()
    git.repo_path = Path("/tap")
    git.origin_repository.return_value = "owner/tap"
    git.is_shallow.return_value = False
    git.current_branch.return_value = "master"
    git.uses_ssh_remote.return_value = False
    git.push_url.return_value = "https://github.com/owner/tap.git"
    return git


@pytest.fixture
def mock_audit():
    audit = Mock()
    audit.run.return_value = True
    audit.describe.return_value = "brew audit foo.rb"
    return audit
