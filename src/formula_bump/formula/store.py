"""Reading and atomically rewriting a formula file."""

import codecs
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..errors import StoreError

logger = logging.getLogger(__name__)


def normalize_encoding(data: bytes) -> tuple[str, list[str]]:
    """
    Decode formula bytes into the canonical text form.

    The canonical form is UTF-8 without a byte order mark and with LF line
    endings. Undecodable bytes are replaced and reported.

    Returns:
        (text, errors) - errors is empty when the bytes were valid UTF-8
    """
    errors = []
    if data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        errors.append(f"invalid UTF-8 byte sequence at offset {e.start}")
        text = data.decode("utf-8", errors="replace")
    return text.replace("\r\n", "\n"), errors


class FormulaStore:
    """File-backed storage for one formula, with a single pre-mutation backup."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._backup: Optional[bytes] = None

    def read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise StoreError(f"Unable to read {self.path}: {e.strerror or e}") from e

    def read(self) -> str:
        """Read the formula in canonical form."""
        text, _ = normalize_encoding(self.read_bytes())
        return text

    def atomic_write(self, content: Union[str, bytes]) -> None:
        """
        Replace the whole file; readers see either old or new content.

        Raises:
            StoreError: The temporary file could not be written or moved into place
        """
        data = content.encode("utf-8") if isinstance(content, str) else content
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            if self.path.exists():
                shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StoreError(f"Unable to write {self.path}: {e.strerror or e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug(f"Wrote {len(data)} bytes to {self.path}")

    def backup(self) -> bytes:
        """Capture the pre-mutation content. Later calls keep the first capture."""
        if self._backup is None:
            self._backup = self.read_bytes()
            logger.debug(f"Captured backup of {self.path} ({len(self._backup)} bytes)")
        return self._backup

    @property
    def has_backup(self) -> bool:
        return self._backup is not None

    def restore(self) -> bool:
        """
        Write the captured backup back and drop it.

        The backup is used at most once; returns False when there is none.
        """
        if self._backup is None:
            return False
        backup, self._backup = self._backup, None
        self.atomic_write(backup)
        logger.info(f"Restored {self.path} from backup")
        return True

    def discard_backup(self) -> None:
        self._backup = None
