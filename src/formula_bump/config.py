"""Configuration management for formula-bump."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _github_token() -> Optional[str]:
    """Read the GitHub token, preferring GITHUB_TOKEN over the Homebrew variable."""
    return os.getenv("GITHUB_TOKEN") or os.getenv("HOMEBREW_GITHUB_API_TOKEN") or None


def _parse_audit_command() -> list[str]:
    """Parse the audit command from environment variable."""
    command = os.getenv("BUMP_AUDIT_COMMAND", "")
    if command.strip():
        return command.split()
    return ["brew", "audit"]


class Settings(BaseModel):
    """Application settings."""

    # GitHub API
    github_api_url: str = os.getenv("GITHUB_API_URL", "https://api.github.com")
    github_token: Optional[str] = _github_token()
    github_timeout_seconds: float = float(os.getenv("GITHUB_TIMEOUT_SECONDS", "30"))

    # Tap (the git repository holding the formulae)
    tap_path: Path = Path(os.getenv("BUMP_TAP_PATH", "."))
    base_branch: str = os.getenv("BUMP_BASE_BRANCH", "master")

    # Downloads
    cache_dir: Path = Path(
        os.getenv("BUMP_CACHE_DIR", str(Path.home() / ".cache" / "formula-bump"))
    )
    download_timeout_seconds: float = float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "120"))

    # Fork readiness polling
    fork_poll_interval_seconds: float = float(os.getenv("FORK_POLL_INTERVAL_SECONDS", "1.0"))
    fork_poll_timeout_seconds: float = float(os.getenv("FORK_POLL_TIMEOUT_SECONDS", "60.0"))

    # External audit step
    audit_command: list[str] = _parse_audit_command()

    # User environment handed to subprocesses and the browser
    user_path: Optional[str] = os.getenv("BUMP_USER_PATH") or None
    browser: Optional[str] = os.getenv("BUMP_BROWSER") or None

    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()


settings = Settings()
