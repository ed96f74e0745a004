"""Resource download and checksum layer."""

from .downloader import ResourceFetcher

__all__ = ["ResourceFetcher"]
