"""Byte-level persistence of document data files.

Each data file holds exactly one document. Writes land in a sibling
temporary file that replaces the destination only once fully written,
so a data file is always either the complete new content or untouched.
"""

from __future__ import annotations

import os
from pathlib import Path
import tempfile

from core.errors import DocumentNotFoundError, StoreReadError, StoreWriteError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class DataStore:
    """Filesystem data file reader and writer."""

    def write(self, path: Path, data: bytes) -> None:
        """Write a complete data file, replacing any previous content.

        Args:
            path: Destination data file path.
            data: Serialized document bytes.

        Raises:
            StoreWriteError: If the file cannot be written.
        """
        temp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, path)
        except OSError as error:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            _LOGGER.error("data_file_write_failed", path=str(path), error=str(error))
            raise StoreWriteError(
                f"Failed to write data file {path}: {error}. "
                "Check directory permissions and free space, then retry the save.",
                path=path,
            ) from error

    def read(self, path: Path) -> bytes:
        """Read a complete data file.

        Args:
            path: Data file path.

        Returns:
            Stored bytes.

        Raises:
            DocumentNotFoundError: If the data file does not exist.
            StoreReadError: If the file cannot be read.
        """
        try:
            with path.open("rb") as handle:
                return handle.read()
        except FileNotFoundError as error:
            raise DocumentNotFoundError(
                f"Data file {path} does not exist.", path=path
            ) from error
        except OSError as error:
            _LOGGER.error("data_file_read_failed", path=str(path), error=str(error))
            raise StoreReadError(
                f"Failed to read data file {path}: {error}. Check file permissions.",
                path=path,
            ) from error

    def delete(self, path: Path) -> bool:
        """Remove a data file if present.

        Args:
            path: Data file path.

        Returns:
            True when a file was removed.

        Raises:
            StoreWriteError: If an existing file cannot be removed.
        """
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as error:
            raise StoreWriteError(
                f"Failed to delete data file {path}: {error}. Check directory permissions.",
                path=path,
            ) from error
        return True
