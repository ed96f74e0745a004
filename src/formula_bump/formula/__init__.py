"""Formula files: models, reading, storage and versions."""

from .loader import FormulaLoader
from .models import Checksum, Formula, Spec, SpecKind
from .store import FormulaStore, normalize_encoding
from .version import Version

__all__ = [
    "FormulaLoader",
    "Checksum",
    "Formula",
    "Spec",
    "SpecKind",
    "FormulaStore",
    "normalize_encoding",
    "Version",
]
