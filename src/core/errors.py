"""Symstore exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Store errors carry the offending path when one is known.
"""

from __future__ import annotations

from pathlib import Path


class SymstoreError(Exception):
    """Base exception for all symstore failures."""


class SymstoreConfigError(SymstoreError):
    """Raised for invalid runtime configuration."""


class SymstoreSchemaError(SymstoreError):
    """Raised for invalid schema declarations or catalogs."""


class SymstoreDependencyError(SymstoreError):
    """Raised when an optional runtime dependency is missing."""


class SymstoreStoreError(SymstoreError):
    """Raised for document storage failures."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class MissingKeysError(SymstoreStoreError):
    """Raised when save or delete is called without usable keys."""


class UnindexableKeyError(MissingKeysError):
    """Raised when every key of a document fails to render to a path."""


class DocumentNotFoundError(SymstoreStoreError):
    """Raised when no key link or data file matches the given keys."""


class BrokenTargetError(SymstoreStoreError):
    """Raised when linking to a data file that does not exist."""


class StoreWriteError(SymstoreStoreError):
    """Raised for I/O failures while writing data files or key links."""


class StoreReadError(SymstoreStoreError):
    """Raised for I/O or decoding failures while reading a data file."""
