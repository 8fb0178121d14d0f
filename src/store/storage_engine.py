"""Document storage engine over data files and symlink key indexes.

This module implements get, save, and delete with upsert semantics.
A document's state lives in one data file named by an opaque handle;
each indexable key is a symlink pointing at that file.

Save order is data file first, then key links. Saves and deletes lock
their key-link paths (sorted) and then the data-file path, so
concurrent writers in one process never interleave on the same
document. Saves are not atomic across links: a failed link write
leaves the data file and earlier links in place, and retrying the
whole save converges.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import uuid

from core.codec import DocumentCodec, JsonDocumentCodec
from core.config import SymstoreConfig
from core.errors import (
    DocumentNotFoundError,
    MissingKeysError,
    StoreReadError,
    StoreWriteError,
    UnindexableKeyError,
)
from core.logging_config import get_logger
from core.schema import SchemaRegistry, load_schema_catalog
from core.types import Document, Keys
from store.data_store import DataStore
from store.key_link_index import KeyLinkIndex, KeyLinks, distinct_paths
from store.path_deriver import PathDeriver
from store.path_locks import PathLockRegistry

_LOGGER = get_logger(__name__)


class StorageEngine:
    """Filesystem document store with symlink key lookups.

    This class owns the store root, decides insert versus update,
    and keeps key links pointing at the current data files.
    """

    def __init__(
        self,
        config: SymstoreConfig,
        registry: SchemaRegistry | None = None,
        codec: DocumentCodec | None = None,
    ) -> None:
        """Initialize the engine from config.

        Args:
            config: Runtime configuration.
            registry: Schema registry; loaded from the configured catalog when omitted.
            codec: Document codec; JSON when omitted.
        """
        if registry is None:
            registry = (
                load_schema_catalog(config.schema_catalog)
                if config.schema_catalog is not None
                else SchemaRegistry()
            )
        self._config = config
        self._registry = registry
        self._codec = codec if codec is not None else JsonDocumentCodec()
        self._deriver = PathDeriver(config.data_root, config.file_extension, registry)
        self._index = KeyLinkIndex(self._deriver, config.file_handle_schema_uri)
        self._data_store = DataStore()
        self._locks = PathLockRegistry()
        config.data_root.mkdir(parents=True, exist_ok=True)

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    @property
    def paths(self) -> PathDeriver:
        return self._deriver

    def resolve(self, keys: Keys) -> Path | None:
        """Return the data file the keys resolve to, if any."""
        return self._index.resolve(keys)

    def exists(self, keys: Keys) -> bool:
        return self._index.resolve(keys) is not None

    def get(self, keys: Keys, schema_uri: str) -> Document:
        """Load the document identified by any of the keys.

        Args:
            keys: Keys to look up, tried in order.
            schema_uri: Schema the stored document is decoded as.

        Returns:
            Stored document carrying its data file as file handle.

        Raises:
            DocumentNotFoundError: If no key resolves.
            StoreReadError: If the data file cannot be read or decoded.
        """
        data_path = self._index.resolve(keys)
        if data_path is None:
            raise DocumentNotFoundError(
                f"No {schema_uri} document matches keys {list(keys.schema_uris)}. "
                "Save the document before reading it."
            )
        return self._load(data_path, keys, schema_uri)

    def save(self, document: Document) -> Document:
        """Insert or update a document and re-link its keys.

        The data file is the document's known file handle when it has
        one, else the data file an existing key link already points at,
        else a new file with a random handle.

        Args:
            document: Document to persist.

        Returns:
            The document as read back from its data file.

        Raises:
            MissingKeysError: If the document carries no keys.
            UnindexableKeyError: If no key renders to a link path and no file handle is known.
            StoreWriteError: If the data file or a key link cannot be written.
        """
        keys = document.keys
        if len(keys) == 0:
            _LOGGER.error("save_without_keys", schema_uri=document.schema_uri)
            raise MissingKeysError(
                f"A {document.schema_uri} document must have one or more keys to be saved."
            )
        link_groups = self._index.link_groups(keys)
        link_paths = distinct_paths(link_groups)
        file_handle = document.file_handle or self._index.file_handle(keys)
        if not link_paths and file_handle is None:
            _LOGGER.error("save_without_indexable_keys", schema_uri=document.schema_uri)
            raise UnindexableKeyError(
                f"None of the keys {list(keys.schema_uris)} of the {document.schema_uri} "
                "document can be rendered to a key link path."
            )
        with self._locks.hold(link_paths):
            inserted = False
            data_path = file_handle or self._linked_data_path(link_groups, document.schema_uri)
            if data_path is None:
                inserted = True
                data_path = self._deriver.data_file_path(document.schema_uri, str(uuid.uuid4()))
            with self._locks.hold([data_path]):
                self._data_store.write(data_path, self._encode(document, data_path))
                for link_path in link_paths:
                    if link_path != data_path:
                        self._index.write(link_path, data_path)
                saved = self._load(data_path, keys, document.schema_uri)
        _LOGGER.info(
            "document_saved",
            schema_uri=document.schema_uri,
            data_path=str(data_path),
            inserted=inserted,
            link_count=len(link_paths),
        )
        return saved

    def delete(self, keys: Keys | None) -> bool:
        """Delete the document the keys resolve to, and its links for those keys.

        Args:
            keys: Keys of the document to delete.

        Returns:
            True when a data file was removed.

        Raises:
            MissingKeysError: If keys are missing.
            StoreWriteError: If the data file or a link cannot be removed.
        """
        if keys is None or len(keys) == 0:
            _LOGGER.error("delete_without_keys")
            raise MissingKeysError("The keys of the document to delete cannot be empty.")
        link_paths = self._index.link_paths(keys)
        with self._locks.hold(link_paths):
            data_path = self._index.resolve(keys)
            if data_path is None:
                return False
            with self._locks.hold([data_path]):
                removed = self._data_store.delete(data_path)
                removed_links = self._index.remove_links_to(link_paths, data_path)
        _LOGGER.info(
            "document_deleted",
            data_path=str(data_path),
            removed=removed,
            removed_link_count=len(removed_links),
        )
        return removed

    def prune_dangling_links(self) -> list[Path]:
        """Remove key links left pointing at deleted data files."""
        return self._index.prune_dangling()

    def _linked_data_path(self, link_groups: list[KeyLinks], schema_uri: str) -> Path | None:
        """Find the data file reused by an existing key link.

        A composite key reuses a data file only through its identity link
        or when all of its sub-slot links agree, so two documents sharing
        one slot value never share a data file.

        Args:
            link_groups: Derived links, one group per key in key order.
            schema_uri: Schema of the document being saved.

        Returns:
            Data file path carrying the existing handle, or None.
        """
        extension = self._deriver.file_extension
        for group in link_groups:
            target = self._index.resolve_group(group)
            if target is None:
                continue
            if target in group.paths:
                return target
            handle = target.name[: -len(extension)] if target.name.endswith(extension) else target.name
            return self._deriver.data_file_path(schema_uri, handle)
        return None

    def _encode(self, document: Document, data_path: Path) -> bytes:
        try:
            return self._codec.serialize(document)
        except (TypeError, ValueError) as error:
            raise StoreWriteError(
                f"Failed to serialize {document.schema_uri} document for {data_path}: {error}.",
                path=data_path,
            ) from error

    def _load(self, data_path: Path, keys: Keys, schema_uri: str) -> Document:
        """Read and decode one data file.

        Args:
            data_path: Data file path.
            keys: Keys attached to the decoded document.
            schema_uri: Schema the document is decoded as.

        Returns:
            Decoded document with its file handle set.

        Raises:
            DocumentNotFoundError: If the data file vanished.
            StoreReadError: If reading or decoding fails.
        """
        data = self._data_store.read(data_path)
        try:
            document = self._codec.deserialize(data, keys, schema_uri)
        except (ValueError, UnicodeDecodeError) as error:
            _LOGGER.error("data_file_decode_failed", path=str(data_path), error=str(error))
            raise StoreReadError(
                f"Failed to read {schema_uri} document from {data_path}: {error}.",
                path=data_path,
            ) from error
        return replace(document, file_handle=data_path)
