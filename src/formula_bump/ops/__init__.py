"""Bump operations: options, results and the end-to-end runner."""

from .bump import FormulaBumper
from .models import BumpOptions, BumpResult

__all__ = [
    "FormulaBumper",
    "BumpOptions",
    "BumpResult",
]
