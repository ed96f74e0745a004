"""Diff generation for formula changes."""

import difflib
from dataclasses import dataclass


@dataclass
class FormulaDiff:
    """Represents the difference between two versions of a formula file."""

    path: str
    old_text: str
    new_text: str

    @property
    def is_empty(self) -> bool:
        return self.old_text == self.new_text

    def to_diff_string(self, context: int = 1) -> str:
        """Generate a human-readable unified diff."""
        lines = difflib.unified_diff(
            self.old_text.splitlines(keepends=True),
            self.new_text.splitlines(keepends=True),
            fromfile=f"a/{self.path}",
            tofile=f"b/{self.path}",
            n=context,
        )
        return "".join(lines)


class FormulaDiffer:
    """Generates line diffs between formula versions."""

    def diff(self, old_text: str, new_text: str, path: str = "") -> FormulaDiff:
        return FormulaDiff(path=path, old_text=old_text, new_text=new_text)
