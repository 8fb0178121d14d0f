"""Runtime configuration model for symstore.

This module owns all environment variable parsing and validation.
The storage engine consumes a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_FILE_EXTENSION,
    DEFAULT_FILE_HANDLE_SCHEMA_URI,
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_NAMES,
)
from core.errors import SymstoreConfigError


@dataclass(frozen=True)
class SymstoreConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Root directory holding schema data and key trees.
        file_extension: Extension shared by data files and key links.
        file_handle_schema_uri: Key schema whose value is a direct data-file path.
        schema_catalog: Optional YAML schema catalog path.
        log_level: Stdlib logging level name used by the CLI.
    """

    data_root: Path
    file_extension: str = DEFAULT_FILE_EXTENSION
    file_handle_schema_uri: str = DEFAULT_FILE_HANDLE_SCHEMA_URI
    schema_catalog: Path | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "SymstoreConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SymstoreConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("SYMSTORE_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        extension_value = os.getenv("SYMSTORE_FILE_EXTENSION", DEFAULT_FILE_EXTENSION)
        handle_schema = os.getenv("SYMSTORE_FILE_HANDLE_SCHEMA", DEFAULT_FILE_HANDLE_SCHEMA_URI)
        catalog_value = os.getenv("SYMSTORE_SCHEMA_CATALOG")
        log_level = os.getenv("SYMSTORE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if not handle_schema.strip():
            raise SymstoreConfigError(
                "Invalid SYMSTORE_FILE_HANDLE_SCHEMA value: expected a schema URI, got a blank string."
            )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            file_extension=normalize_file_extension(extension_value),
            file_handle_schema_uri=handle_schema.strip(),
            schema_catalog=Path(catalog_value).expanduser().resolve() if catalog_value else None,
            log_level=_parse_log_level(log_level),
        )


def normalize_file_extension(raw_value: str) -> str:
    """Normalize and validate a configured file extension.

    Args:
        raw_value: Extension with or without a leading dot.

    Returns:
        Extension starting with a single dot.

    Raises:
        SymstoreConfigError: If the extension is blank or contains a separator.
    """
    extension = raw_value.strip()
    if extension.startswith("."):
        extension = extension[1:]
    if not extension or "/" in extension or "\\" in extension:
        raise SymstoreConfigError(
            f"Invalid SYMSTORE_FILE_EXTENSION value '{raw_value}': "
            "expected a non-empty extension such as '.json'."
        )
    return f".{extension}"


def _parse_log_level(raw_value: str) -> str:
    """Validate the log level environment value.

    Args:
        raw_value: Upper-cased level name.

    Returns:
        The validated level name.

    Raises:
        SymstoreConfigError: If the level is not a stdlib level name.
    """
    if raw_value not in LOG_LEVEL_NAMES:
        raise SymstoreConfigError(
            f"Invalid SYMSTORE_LOG_LEVEL value '{raw_value}': "
            f"expected one of {', '.join(LOG_LEVEL_NAMES)}."
        )
    return raw_value
