"""Reading formula files into specs, and finding formulae in a tap."""

import logging
import re
from pathlib import Path
from typing import Optional

from ..errors import FormulaLoadError, FormulaNotFoundError, StoreError, UsageError
from .models import Checksum, Formula, Spec, SpecKind
from .store import FormulaStore
from .version import Version

logger = logging.getLogger(__name__)

# `name do ... end` and `def ... end` blocks, closed by an `end` at the same indent.
_BLOCK_RE = re.compile(
    r"^(?P<indent>[ \t]+)(?:\w+\b[^\n]*?[ \t]+do(?:\s*\|[^|\n]*\|)?|def\s[^\n]*)[ \t]*\n"
    r".*?^(?P=indent)end[ \t]*(?:\n|\Z)",
    re.MULTILINE | re.DOTALL,
)
_URL_RE = re.compile(
    r'^[ \t]*url[ \t]+"(?P<url>[^"]+)"'
    r'(?P<opts>(?:[ \t]*,[ \t]*\n?[ \t]*(?::\w+[ \t]*=>|\w+:)[ \t]*(?:"[^"]*"|:\w+))*)',
    re.MULTILINE,
)
_URL_OPT_RE = re.compile(r'(?::(\w+)[ \t]*=>|(\w+):)[ \t]*(?:"([^"]*)"|:(\w+))')
_CHECKSUM_RE = re.compile(r'^[ \t]*(sha256|sha1|md5)[ \t]+"([0-9a-fA-F]+)"', re.MULTILINE)
_MIRROR_RE = re.compile(r'^[ \t]*mirror[ \t]+"([^"]+)"', re.MULTILINE)
_VERSION_RE = re.compile(r'^[ \t]*version[ \t]+"([^"]+)"', re.MULTILINE)
_REVISION_RE = re.compile(r"^[ \t]*revision[ \t]+(\d+)[ \t]*$", re.MULTILINE)
_VERSIONED_ALIAS_RE = re.compile(r"^.*@\d+(\.\d+)?$")


def _block_body(text: str, name: str) -> Optional[str]:
    pattern = re.compile(
        rf"^(?P<indent>[ \t]+){name}[ \t]+do[ \t]*\n(?P<body>.*?)^(?P=indent)end[ \t]*$",
        re.MULTILINE | re.DOTALL,
    )
    match = pattern.search(text)
    return match.group("body") if match else None


def _strip_blocks(text: str) -> str:
    return _BLOCK_RE.sub("", text)


def _class_body(text: str) -> str:
    """Everything between the class line and the final `end`."""
    match = re.search(r"^class\s+\S+[^\n]*\n", text, re.MULTILINE)
    body = text[match.end():] if match else text
    return re.sub(r"^end[ \t]*\n?\s*\Z", "", body, flags=re.MULTILINE)


def _parse_spec(section: str, kind: SpecKind) -> Optional[Spec]:
    url_match = _URL_RE.search(section)
    if not url_match:
        return None

    options = {}
    for key_old, key_new, quoted, symbol in _URL_OPT_RE.findall(url_match.group("opts")):
        options[key_old or key_new] = quoted or symbol

    checksum = None
    checksum_match = _CHECKSUM_RE.search(section)
    if checksum_match:
        checksum = Checksum(hash_type=checksum_match.group(1), hexdigest=checksum_match.group(2))

    version_match = _VERSION_RE.search(section)
    spec = Spec(
        kind=kind,
        url=url_match.group("url"),
        checksum=checksum,
        mirrors=_MIRROR_RE.findall(section),
        tag=options.get("tag"),
        revision=options.get("revision"),
        version_override=version_match.group(1) if version_match else None,
    )
    if spec.checksum is not None and spec.tag is not None:
        raise FormulaLoadError(
            f"{kind} spec declares both a checksum and a tag; only one style is allowed"
        )
    return spec


class FormulaLoader:
    """Loads formulae from files and text, and locates them inside a tap."""

    def __init__(self, tap_path: Optional[Path] = None):
        self.tap_path = Path(tap_path) if tap_path else None

    def from_contents(
        self,
        name: str,
        path: Path,
        contents: str,
        aliases: Optional[list[str]] = None,
        alias_dir: Optional[Path] = None,
    ) -> Formula:
        """Build a Formula from text without touching the file system."""
        body = _class_body(contents)

        stable_body = _block_body(body, "stable")
        top_level = _strip_blocks(body)
        stable = _parse_spec(
            _strip_blocks(stable_body) if stable_body is not None else top_level, "stable"
        )

        devel_body = _block_body(body, "devel")
        devel = _parse_spec(_strip_blocks(devel_body), "devel") if devel_body else None

        if stable is None and devel is None:
            raise FormulaLoadError(f"{name}: no url found in {path}")

        revision_match = _REVISION_RE.search(top_level)
        return Formula(
            name=name,
            path=Path(path),
            aliases=aliases or [],
            alias_dir=alias_dir,
            revision=int(revision_match.group(1)) if revision_match else 0,
            stable=stable,
            devel=devel,
        )

    def load(self, path: Path) -> Formula:
        """Load a formula file, including the aliases that point at it."""
        path = Path(path)
        if not path.is_file():
            raise FormulaNotFoundError(f"No available formula at {path}")
        contents = FormulaStore(path).read()
        formula = self.from_contents(path.stem, path, contents)
        alias_dir = formula.tap_path / "Aliases"
        formula.alias_dir = alias_dir
        formula.aliases = self.find_aliases(path, alias_dir)
        logger.debug(f"Loaded {formula.name} from {path} (aliases: {formula.aliases})")
        return formula

    def formula_version(
        self, name: str, path: Path, kind: SpecKind, contents: Optional[str] = None
    ) -> Version:
        """Derive a spec's version from the file, or from ``contents`` if given."""
        if contents is None:
            contents = FormulaStore(path).read()
        formula = self.from_contents(name, path, contents)
        spec = formula.spec(kind)
        if spec is None:
            raise FormulaLoadError(f"{name}: no {kind} specification found!")
        version = spec.version
        if version is None:
            raise FormulaLoadError(f"{name}: unable to determine the {kind} version")
        return version

    @staticmethod
    def find_aliases(path: Path, alias_dir: Path) -> list[str]:
        """Names in ``alias_dir`` that resolve to ``path``."""
        if not alias_dir.is_dir():
            return []
        target = Path(path).resolve()
        aliases = []
        for entry in sorted(alias_dir.iterdir()):
            if entry.resolve() == target:
                aliases.append(entry.name)
        return aliases

    @staticmethod
    def versioned_alias(aliases: list[str]) -> Optional[str]:
        """The first alias shaped like ``name@1`` or ``name@1.2``."""
        for alias in aliases:
            if _VERSIONED_ALIAS_RE.match(alias):
                return alias
        return None

    def _formula_dir(self) -> Path:
        if self.tap_path is None:
            raise UsageError("No tap path configured")
        formula_dir = self.tap_path / "Formula"
        return formula_dir if formula_dir.is_dir() else self.tap_path

    def resolve(self, name_or_path: str) -> Path:
        """Turn a formula argument (path or name) into a formula file path."""
        candidate = Path(name_or_path)
        if candidate.suffix == ".rb" or candidate.is_file():
            if candidate.is_file():
                return candidate
            raise FormulaNotFoundError(f"No available formula at {candidate}")
        if self.tap_path is not None:
            for path in (
                self.tap_path / "Formula" / f"{name_or_path}.rb",
                self.tap_path / f"{name_or_path}.rb",
            ):
                if path.is_file():
                    return path
            # sharded layouts such as Formula/f/foo.rb
            matches = sorted(self._formula_dir().rglob(f"{name_or_path}.rb"))
            if matches:
                return matches[0]
        raise FormulaNotFoundError(f"No available formula with the name \"{name_or_path}\"")

    def all_formula_paths(self) -> list[Path]:
        return sorted(self._formula_dir().rglob("*.rb"))

    def guess_from_url(self, new_url: str, devel: bool = False) -> Path:
        """
        Find the single formula whose current URL shares the new URL's prefix.

        Only the first ``min(n - 1, 5)`` ``/``-separated components of the new URL
        are compared, since the last component is not always the only one that
        changes between releases.
        """
        components = new_url.split("/")
        components_to_match = min(len(components) - 1, 5)
        base_url = "/".join(components[:components_to_match])

        guesses = []
        for path in self.all_formula_paths():
            try:
                formula = self.from_contents(path.stem, path, FormulaStore(path).read())
            except (FormulaLoadError, StoreError):
                logger.debug(f"Skipping unreadable formula {path}")
                continue
            if devel and formula.devel and formula.devel.url and base_url in formula.devel.url:
                guesses.append(path)
            elif formula.stable and formula.stable.url and base_url in formula.stable.url:
                guesses.append(path)

        if len(guesses) == 1:
            return guesses[0]
        if len(guesses) > 1:
            names = ", ".join(p.stem for p in guesses)
            raise UsageError(f"Couldn't guess formula for sure; could be one of these:\n{names}")
        raise FormulaNotFoundError("No formula specified and none matches the new URL")
