"""Decide the new source fields of a spec from the requested update."""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from ..errors import UsageError
from ..fetch import ResourceFetcher
from ..formula import Formula, Spec, Version

logger = logging.getLogger(__name__)

TAR_FILE_EXTENSIONS = [".tar", ".tb2", ".tbz", ".tbz2", ".tgz", ".tlz", ".txz", ".tZ"]

# (host path, mirror host path); applied to stable URLs only
MIRROR_SUBSTITUTIONS = [
    ("ftp.gnu.org/gnu", "ftpmirror.gnu.org"),
    ("mirrors.ocf.berkeley.edu/debian", "mirrorservice.org/sites/ftp.debian.org/debian"),
]


class UpdateRequest(BaseModel):
    """What the user asked for on the command line."""

    url: Optional[str] = None
    checksum: Optional[str] = None
    tag: Optional[str] = None
    revision: Optional[str] = None
    mirror: Optional[str] = None
    version: Optional[str] = None  # forced version; "0" removes an override


class SpecUpdate(BaseModel):
    """The resolved, immutable decision about the new source fields."""

    model_config = ConfigDict(frozen=True)

    style: Literal["url-hash", "tag-revision"]
    url: Optional[str] = None
    checksum: Optional[str] = None
    hash_type: str = "sha256"
    tag: Optional[str] = None
    revision: Optional[str] = None
    mirror: Optional[str] = None

    @property
    def is_url_hash(self) -> bool:
        return self.style == "url-hash"


def derive_mirror(url: str, kind: str) -> Optional[str]:
    """Mirror URL for well-known mirrored hosts, stable spec only."""
    if kind == "devel":
        return None
    for host, mirror_host in MIRROR_SUBSTITUTIONS:
        if host in url:
            return url.replace(host, mirror_host, 1)
    return None


def is_tar_url(url: str) -> bool:
    return any(extension in url for extension in TAR_FILE_EXTENSIONS)


class VersionSpecResolver:
    """Validates the requested update against the spec and fills in the checksum."""

    def __init__(self, fetcher: Optional[ResourceFetcher] = None):
        self.fetcher = fetcher or ResourceFetcher()

    @staticmethod
    def validate_request(request: UpdateRequest) -> None:
        """Reject option combinations that can never be valid."""
        if request.url and request.tag:
            raise UsageError("Options --url and --tag are mutually exclusive.")
        if request.checksum and not request.url:
            raise UsageError("Option --sha256 requires --url.")
        if request.tag and not request.revision:
            raise UsageError("Option --tag requires --revision.")
        if request.revision and not request.tag:
            raise UsageError("Option --revision requires --tag.")

    def resolve(self, formula: Formula, spec: Spec, request: UpdateRequest) -> SpecUpdate:
        """
        Decide the new URL and checksum, or the new tag and revision.

        Args:
            formula: The formula being bumped
            spec: The stable or devel spec being bumped
            request: The requested update

        Returns:
            SpecUpdate describing the new field values

        Raises:
            UsageError: Missing or conflicting options, or a style mismatch
            ResolutionError: The download or archive check failed
        """
        self.validate_request(request)
        hash_type = spec.checksum.hash_type if spec.checksum else "sha256"

        if request.url and request.checksum:
            if not spec.is_url_style:
                raise UsageError(
                    f"{formula.name}: the {spec.kind} spec uses a tag and revision; "
                    "specify --tag= and --revision= instead of --url= and --sha256="
                )
            return SpecUpdate(
                style="url-hash",
                url=request.url,
                checksum=request.checksum,
                hash_type=hash_type,
                mirror=request.mirror or derive_mirror(request.url, spec.kind),
            )

        if request.tag and request.revision:
            if spec.is_url_style:
                raise UsageError(
                    f"{formula.name}: the {spec.kind} spec uses a URL and checksum; "
                    "specify --url= instead of --tag= and --revision="
                )
            return SpecUpdate(
                style="tag-revision",
                tag=request.tag,
                revision=request.revision,
                mirror=request.mirror,
            )

        if spec.checksum is None:
            raise UsageError(f"{formula.name}: no --tag=/--revision= arguments specified!")
        if not request.url:
            raise UsageError(f"{formula.name}: no --url= argument specified!")

        checksum = self._fetch_checksum(formula, request)
        return SpecUpdate(
            style="url-hash",
            url=request.url,
            checksum=checksum,
            hash_type=hash_type,
            mirror=request.mirror or derive_mirror(request.url, spec.kind),
        )

    def _fetch_checksum(self, formula: Formula, request: UpdateRequest) -> str:
        version = Version(request.version) if request.version else Version.parse(request.url)
        if version is None:
            raise UsageError("No --version= argument specified!")

        strategy = self.fetcher.resolve_download_strategy(request.url)
        logger.info(f"Fetching {request.url} with the {strategy} strategy")
        resource_path = self.fetcher.fetch(request.url, formula.name, str(version))

        if is_tar_url(request.url):
            self.fetcher.verify_tar_archive(resource_path)
        return self.fetcher.sha256(resource_path)
