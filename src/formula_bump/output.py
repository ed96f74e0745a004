"""User-facing console output.

Narration goes to stdout and warnings to stderr. Diagnostic messages use
``logging`` instead.
"""

import sys


def heading(message: str) -> None:
    """Print a step headline."""
    print(f"==> {message}", flush=True)


def warning(message: str) -> None:
    """Print a warning to stderr."""
    print(f"Warning: {message}", file=sys.stderr, flush=True)


def error(message: str) -> None:
    """Print an error to stderr."""
    print(f"Error: {message}", file=sys.stderr, flush=True)
