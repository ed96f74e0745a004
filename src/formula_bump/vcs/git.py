"""Thin wrapper around the git command line."""

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from ..errors import VCSError

logger = logging.getLogger(__name__)

_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/](?P<repo>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")


def parse_github_repository(remote_url: str) -> Optional[str]:
    """``owner/repo`` from an HTTPS or SSH GitHub remote URL."""
    match = _GITHUB_REMOTE_RE.search(remote_url.strip())
    return match.group("repo") if match else None


class Git:
    """Runs git commands inside one repository."""

    def __init__(self, repo_path: Path, env: Optional[dict] = None):
        self.repo_path = Path(repo_path)
        self.env = env

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        """
        Run ``git -C <repo> <args>``.

        Raises:
            VCSError: The command exited non-zero (when ``check``) or git is missing
        """
        command = ["git", "-C", str(self.repo_path), *args]
        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(command, capture_output=True, text=True, env=self.env)
        except OSError as e:
            raise VCSError(f"Unable to run git: {e}") from e
        if check and result.returncode != 0:
            message = result.stderr.strip() or result.stdout.strip()
            raise VCSError(
                f"Failure while executing; `{' '.join(['git', *args])}` "
                f"exited with {result.returncode}.\n{message}"
            )
        return result

    def output(self, *args: str) -> str:
        return self.run(*args).stdout.strip()

    def current_branch(self) -> str:
        """Branch checked out now, or ``master`` on a detached HEAD."""
        result = self.run("symbolic-ref", "-q", "--short", "HEAD", check=False)
        return result.stdout.strip() or "master"

    def git_dir(self) -> Optional[Path]:
        result = self.run("rev-parse", "--git-dir", check=False)
        path = result.stdout.strip()
        if result.returncode != 0 or not path:
            return None
        git_dir = Path(path)
        return git_dir if git_dir.is_absolute() else self.repo_path / git_dir

    def is_shallow(self) -> bool:
        git_dir = self.git_dir()
        return git_dir is not None and (git_dir / "shallow").exists()

    def push_url(self, remote: str = "origin") -> str:
        return self.output("remote", "get-url", "--push", remote)

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        result = self.run("remote", "get-url", remote, check=False)
        return result.stdout.strip() or None

    def origin_repository(self) -> Optional[str]:
        """GitHub ``owner/repo`` of the origin remote."""
        url = self.remote_url("origin")
        return parse_github_repository(url) if url else None

    def uses_ssh_remote(self) -> bool:
        """True when any configured remote is an SSH GitHub URL."""
        result = self.run(
            "config", "--local", "--get-regexp", r"remote\..*\.url", "git@github.com:.*",
            check=False,
        )
        return result.returncode == 0

    def fetch_unshallow(self, remote: str = "origin") -> None:
        self.run("fetch", "--unshallow", remote)

    def add(self, paths: list[Path]) -> None:
        self.run("add", *[str(p) for p in paths])

    def checkout_new_branch(self, branch: str, start_point: str) -> None:
        self.run("checkout", "--no-track", "-b", branch, start_point)

    def commit(self, message: str, paths: list[Path]) -> None:
        self.run("commit", "--no-edit", "--verbose", f"--message={message}", "--", *[str(p) for p in paths])

    def push(self, remote_url: str, branch: str) -> None:
        self.run("push", "--set-upstream", remote_url, f"{branch}:{branch}")

    def checkout(self, branch: str) -> None:
        self.run("checkout", "--quiet", branch)
