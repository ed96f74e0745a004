"""Comparable formula versions and version detection from URLs and tags."""

import re
from functools import total_ordering
from posixpath import basename
from typing import Optional
from urllib.parse import urlparse

_TOKEN_RE = re.compile(r"\d+|[a-zA-Z]+")

# Ranks for pre-release words; they sort before the release itself.
PRERELEASE_RANKS = {"alpha": 0, "a": 0, "beta": 1, "b": 1, "pre": 2, "rc": 3}
PATCH_WORDS = {"p", "pl", "patch"}

# Mixed-kind ordering: pre-release < other words < patch < number.
_KIND_RANKS = {"prerelease": 0, "string": 1, "patch": 2, "numeric": 3}

_ARCHIVE_EXT_RE = re.compile(
    r"\.(?:tar\.(?:gz|bz2|xz|lz|lzma|Z|zst)|tgz|tbz2?|tb2|txz|tlz|tZ|tar|zip|7z|"
    r"gem|jar|xz|gz|bz2|lz|dmg|pkg|rar|crate|whl)$",
    re.IGNORECASE,
)
_SUFFIX = r"(?:[-_.]?(?:alpha|beta|rc|pre|dev|a|b|p)\.?\d*)?"
_STEM_PATTERNS = [
    # v1.2.3, 1.2.3-rc1 (GitHub archive names)
    re.compile(rf"^v?(\d+(?:\.\d+)*{_SUFFIX})$", re.IGNORECASE),
    # foo-1.2.3, foo_1.2.3-beta2, foo-1.2.3-src
    re.compile(
        rf"[-_]v?(\d+(?:\.\d+)+{_SUFFIX})"
        r"(?:[-_.](?:src|source|orig|final|stable|release|dist|full))*$",
        re.IGNORECASE,
    ),
    # foo-5
    re.compile(r"[-_]v?(\d+)$"),
    # anything dotted, as a last resort
    re.compile(r"(\d+(?:\.\d+)+)"),
]
_TAG_RE = re.compile(
    r"\d+(?:[._]\d+)*(?:[-._]?(?:alpha|beta|rc|pre|a|b)\.?\d*)?", re.IGNORECASE
)


class _Token:
    __slots__ = ("kind", "value")

    def __init__(self, text: str):
        if text.isdigit():
            self.kind = "numeric"
            self.value = int(text)
        else:
            lowered = text.lower()
            if lowered in PRERELEASE_RANKS:
                self.kind = "prerelease"
                self.value = PRERELEASE_RANKS[lowered]
            elif lowered in PATCH_WORDS:
                self.kind = "patch"
                self.value = lowered
            else:
                self.kind = "string"
                self.value = lowered

    def is_null_equivalent(self) -> bool:
        return self.kind == "numeric" and self.value == 0


def _cmp_to_null(token: _Token) -> int:
    if token.kind == "numeric":
        return 1 if token.value > 0 else 0
    if token.kind == "prerelease":
        return -1
    return 1


def _cmp_tokens(left: Optional[_Token], right: Optional[_Token]) -> int:
    if left is None and right is None:
        return 0
    if right is None:
        return _cmp_to_null(left)
    if left is None:
        return -_cmp_to_null(right)
    if left.kind != right.kind:
        return (_KIND_RANKS[left.kind] > _KIND_RANKS[right.kind]) - (
            _KIND_RANKS[left.kind] < _KIND_RANKS[right.kind]
        )
    return (left.value > right.value) - (left.value < right.value)


@total_ordering
class Version:
    """A formula version.

    Versions compare token by token: numbers numerically, missing trailing
    components as zero (``1.0 == 1.0.0``), pre-release words before the
    release (``1.0rc1 < 1.0``) and patch words after it (``1.0 < 1.0p1``).
    """

    def __init__(self, value: str):
        value = str(value).strip()
        if not value:
            raise ValueError("Version string must not be empty")
        self._value = value
        self._tokens = [_Token(t) for t in _TOKEN_RE.findall(value)]

    @classmethod
    def parse(cls, url: str) -> Optional["Version"]:
        """Detect the version from a download URL, or None if none is found."""
        path = urlparse(url).path if "://" in url else url
        components = [c for c in path.split("/") if c]
        if not components:
            return None

        stem = _ARCHIVE_EXT_RE.sub("", basename(path.rstrip("/")))
        found = _match_stem(stem)
        if found:
            return cls(found)

        # e.g. .../foo-1.2.3/download or .../releases/download/v1.2.3/foo.tar.gz
        for component in reversed(components[:-1]):
            found = _match_stem(_ARCHIVE_EXT_RE.sub("", component))
            if found:
                return cls(found)
        return None

    @classmethod
    def from_tag(cls, tag: str) -> Optional["Version"]:
        """Detect the version from a VCS tag such as ``v1.2.3`` or ``REL_1_2``."""
        match = _TAG_RE.search(tag)
        if not match:
            return None
        return cls(match.group(0).replace("_", "."))

    @property
    def is_sentinel(self) -> bool:
        """True for the ``0`` version that means "remove the override"."""
        return self._value == "0"

    def major_minor(self, segments: int) -> Optional[str]:
        """Leading ``segments`` numeric components, e.g. ``3.5`` for 2 of 3.5.2."""
        pattern = r"^\d+" if segments == 1 else r"^\d+\.\d+"
        match = re.match(pattern, self._value)
        return match.group(0) if match else None

    def _compare(self, other: "Version") -> int:
        length = max(len(self._tokens), len(other._tokens))
        for index in range(length):
            left = self._tokens[index] if index < len(self._tokens) else None
            right = other._tokens[index] if index < len(other._tokens) else None
            result = _cmp_tokens(left, right)
            if result:
                return result
        return 0

    def __eq__(self, other) -> bool:
        if isinstance(other, str):
            other = Version(other)
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other) -> bool:
        if isinstance(other, str):
            other = Version(other)
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        tokens = list(self._tokens)
        while tokens and tokens[-1].is_null_equivalent():
            tokens.pop()
        return hash(tuple((t.kind, t.value) for t in tokens))

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"Version({self._value!r})"


def _match_stem(stem: str) -> Optional[str]:
    if not any(ch.isdigit() for ch in stem):
        return None
    for pattern in _STEM_PATTERNS:
        match = pattern.search(stem)
        if match:
            return match.group(1)
    return None
