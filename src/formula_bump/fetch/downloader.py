"""Downloading new source archives and computing their checksums."""

import hashlib
import logging
import os
import re
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from ..config import settings
from ..errors import ResolutionError

logger = logging.getLogger(__name__)

USER_AGENT = "formula-bump"

_EXTENSION_RE = re.compile(
    r"(\.tar\.(?:gz|bz2|xz|lz|lzma|Z|zst)|\.[A-Za-z][A-Za-z0-9]{0,4})$"
)


class ResourceFetcher:
    """Fetches a URL into the download cache and hashes the result."""

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else settings.cache_dir
        self.timeout = timeout if timeout is not None else settings.download_timeout_seconds
        self.transport = transport

    @staticmethod
    def resolve_download_strategy(url: str) -> str:
        """Pick how a URL would be downloaded: ``git`` or ``curl``."""
        if url.startswith("git://") or url.startswith("git+") or url.endswith(".git"):
            return "git"
        if url.startswith(("http://", "https://")):
            return "curl"
        raise ResolutionError(f"Unsupported download URL: {url}")

    def cache_path(self, url: str, name: str, version: str) -> Path:
        """Where a download of ``name`` at ``version`` is cached."""
        basename = url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
        match = _EXTENSION_RE.search(basename)
        extension = match.group(1) if match else ""
        return self.cache_dir / f"{name}--{version}{extension}"

    def fetch(self, url: str, name: str, version: str) -> Path:
        """
        Download ``url`` unless a non-empty cached copy already exists.

        Returns:
            Path of the downloaded file

        Raises:
            ResolutionError: Unsupported strategy, HTTP failure or I/O failure
        """
        strategy = self.resolve_download_strategy(url)
        if strategy != "curl":
            raise ResolutionError(
                f"Cannot compute a checksum for a {strategy} download: {url}"
            )

        target = self.cache_path(url, name, version)
        if target.is_file() and target.stat().st_size > 0:
            logger.info(f"Already downloaded: {target}")
            return target

        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".incomplete")
            with os.fdopen(fd, "wb") as f:
                with httpx.Client(
                    timeout=self.timeout,
                    follow_redirects=True,
                    transport=self.transport,
                    headers={"User-Agent": USER_AGENT},
                ) as client:
                    with client.stream("GET", url) as response:
                        response.raise_for_status()
                        for chunk in response.iter_bytes():
                            f.write(chunk)
            os.replace(tmp_name, target)
        except httpx.HTTPStatusError as e:
            raise ResolutionError(
                f"Download failed: {url} (HTTP {e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            raise ResolutionError(f"Download failed: {url} ({e})") from e
        except OSError as e:
            raise ResolutionError(f"Unable to save {url} to {target}: {e.strerror or e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info(f"Downloaded {url} to {target}")
        return target

    @staticmethod
    def sha256(path: Path) -> str:
        digest = hashlib.sha256()
        try:
            with open(path, "rb") as f:
                for block in iter(lambda: f.read(1024 * 1024), b""):
                    digest.update(block)
        except OSError as e:
            raise ResolutionError(f"Unable to read {path}: {e.strerror or e}") from e
        return digest.hexdigest()

    @staticmethod
    def tar_executable() -> Optional[str]:
        return shutil.which("gtar") or shutil.which("tar")

    def verify_tar_archive(self, path: Path) -> None:
        """
        Check that a tarball lists at least one ``dir/file.ext`` entry.

        Raises:
            ResolutionError: No tar executable, unreadable or empty archive
        """
        tar = self.tar_executable()
        if tar is None:
            raise ResolutionError("No tar executable found to verify the download")

        try:
            result = subprocess.run(
                [tar, "-tf", str(path)],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ResolutionError(f"Unable to run {tar}: {e.strerror or e}") from e
        if result.returncode != 0 or not re.search(r"/.*\.", result.stdout):
            logger.debug(f"tar -tf {path} exited {result.returncode}: {result.stderr.strip()}")
            raise ResolutionError(f"{path} is not a valid tar file!")
