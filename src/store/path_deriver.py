"""Filesystem path derivation for data files and key links.

This module maps schema URIs, handles, and key values onto the
persisted layout. It performs no I/O:

    <root>/<schema/unique/name>/data/<handle><ext>
    <root>/<key/schema/unique/name>/keys/<derived/key/path><ext>
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit

from core.constants import (
    COMPOSITE_KEY_SEPARATOR,
    COMPOSITE_SLOT_SEPARATOR,
    DATA_DIR_NAME,
    DEFAULT_URI_PORTS,
    INDEX_SEGMENT,
    KEYS_DIR_NAME,
    NULL_KEY_TEXT,
)
from core.schema import SchemaRegistry
from core.syntax import render_scalar
from core.types import CompositeKey, KeyValue, ScalarKey, UriKey


class PathDeriver:
    """Pure mapping from schema and key identities to paths."""

    def __init__(self, data_root: Path, file_extension: str, registry: SchemaRegistry) -> None:
        """Initialize the deriver.

        Args:
            data_root: Absolute store root directory.
            file_extension: Extension with a leading dot.
            registry: Schema registry supplying unique names and key slots.
        """
        self._data_root = Path(os.path.normpath(data_root))
        self._file_extension = file_extension
        self._registry = registry

    @property
    def data_root(self) -> Path:
        return self._data_root

    @property
    def file_extension(self) -> str:
        return self._file_extension

    def schema_directory(self, schema_uri: str) -> Path:
        """Return the directory owned by a schema.

        Args:
            schema_uri: Schema URI.

        Returns:
            Root-relative directory of the schema's unique name.
        """
        unique_name = self._registry.unique_name(schema_uri)
        return Path(os.path.normpath(self._data_root / unique_name.full_name.lstrip("/")))

    def data_file_path(self, schema_uri: str, handle: str) -> Path:
        """Return the data file path for a document handle.

        Args:
            schema_uri: Document schema URI.
            handle: Opaque data file handle.

        Returns:
            Data file path.
        """
        return self.schema_directory(schema_uri) / DATA_DIR_NAME / f"{handle}{self._file_extension}"

    def keys_directory(self, key_schema_uri: str) -> Path:
        return self.schema_directory(key_schema_uri) / KEYS_DIR_NAME

    def key_link_paths(self, key_schema_uri: str, key_value: KeyValue) -> list[Path]:
        """Return every link path for one key, expanding composite keys.

        Composite sub-slots are each indexed as a standalone scalar key,
        in declared slot order when the schema declares one.

        Args:
            key_schema_uri: Key schema URI.
            key_value: Key value variant.

        Returns:
            Derivable link paths; unindexable values are omitted.
        """
        if isinstance(key_value, CompositeKey):
            slot_names = self._ordered_slot_names(key_schema_uri, key_value)
            candidates = [
                self.key_link_path(key_schema_uri, ScalarKey(key_value.slots[name]))
                for name in slot_names
            ]
        else:
            candidates = [self.key_link_path(key_schema_uri, key_value)]
        return [path for path in candidates if path is not None]

    def composite_link_path(self, key_schema_uri: str, key_value: CompositeKey) -> Path | None:
        """Derive the identity link path of a whole composite key.

        The link name joins every rendered slot as ``name_value`` pairs
        separated by double underscores, in declared slot order. Sub-slot
        links can be shared by several documents; this link cannot.

        Args:
            key_schema_uri: Key schema URI.
            key_value: Composite key value.

        Returns:
            Normalized link path, or None when any slot cannot be rendered.
        """
        pairs = []
        for name in self._ordered_slot_names(key_schema_uri, key_value):
            slot_text = render_scalar(key_value.slots[name])
            if slot_text is None or slot_text == NULL_KEY_TEXT:
                return None
            pairs.append(f"{name}{COMPOSITE_SLOT_SEPARATOR}{slot_text}")
        if not pairs:
            return None
        return self.key_link_path(key_schema_uri, ScalarKey(COMPOSITE_KEY_SEPARATOR.join(pairs)))

    def key_link_path(self, key_schema_uri: str, key_value: ScalarKey | UriKey) -> Path | None:
        """Derive the link path for a single scalar or URI key value.

        Args:
            key_schema_uri: Key schema URI.
            key_value: Scalar or URI key value.

        Returns:
            Normalized link path, or None when the value cannot be indexed.
        """
        keys_dir = self.keys_directory(key_schema_uri)
        if isinstance(key_value, UriKey):
            uri_parts = _uri_segments(key_value.uri)
            if uri_parts is None:
                return None
            segments, key_text = uri_parts
        else:
            key_text = render_scalar(key_value.value)
            if key_text is None or key_text == NULL_KEY_TEXT:
                return None
            segments = []
            key_text = key_text.lstrip("/")
        if not key_text.strip():
            key_text = INDEX_SEGMENT
        elif key_text.endswith("/"):
            key_text += INDEX_SEGMENT
        if not key_text.endswith(self._file_extension):
            key_text += self._file_extension
        link_path = Path(os.path.normpath(keys_dir.joinpath(*segments, key_text)))
        if link_path == keys_dir or not link_path.is_relative_to(keys_dir):
            return None
        return link_path

    def _ordered_slot_names(self, key_schema_uri: str, key_value: CompositeKey) -> list[str]:
        declared = self._registry.declared_key_slot_names(key_schema_uri)
        ordered = [name for name in declared if name in key_value.slots]
        ordered.extend(name for name in key_value.slots if name not in ordered)
        return ordered


def _uri_segments(uri: str) -> tuple[list[str], str] | None:
    """Split a URI key into host/port directory segments and a path tail.

    Args:
        uri: URI key text.

    Returns:
        Pair of leading segments and path text, or None for blank hosts.
    """
    parts = urlsplit(uri)
    host = parts.hostname
    if host is None or not host.strip():
        return None
    try:
        port = parts.port
    except ValueError:
        return None
    if port is None:
        port = DEFAULT_URI_PORTS.get(parts.scheme.lower())
    segments = [host]
    if port is not None:
        segments.append(str(port))
    return segments, parts.path.lstrip("/")
