"""Public SDK surface for symstore.

This module provides a stable import path for library users.
It re-exports the storage engine and typed models.
"""

from __future__ import annotations

from core.codec import DocumentCodec, JsonDocumentCodec
from core.config import SymstoreConfig
from core.errors import (
    BrokenTargetError,
    DocumentNotFoundError,
    MissingKeysError,
    StoreReadError,
    StoreWriteError,
    SymstoreError,
    UnindexableKeyError,
)
from core.schema import SchemaDefinition, SchemaRegistry, load_schema_catalog
from core.types import CompositeKey, Document, Keys, ScalarKey, UniqueName, UriKey
from store.storage_engine import StorageEngine

__all__ = [
    "BrokenTargetError",
    "CompositeKey",
    "Document",
    "DocumentCodec",
    "DocumentNotFoundError",
    "JsonDocumentCodec",
    "Keys",
    "MissingKeysError",
    "ScalarKey",
    "SchemaDefinition",
    "SchemaRegistry",
    "StorageEngine",
    "StoreReadError",
    "StoreWriteError",
    "SymstoreConfig",
    "SymstoreError",
    "UnindexableKeyError",
    "UniqueName",
    "UriKey",
    "load_schema_catalog",
]
