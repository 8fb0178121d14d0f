"""Document serialization boundary.

This module defines the codec protocol the storage engine writes through
and the default JSON codec. The engine treats encoded bytes opaquely.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from core.constants import JSON_INDENT
from core.types import Document, Keys


class DocumentCodec(Protocol):
    """Format-specific conversion between documents and bytes."""

    def serialize(self, document: Document) -> bytes:
        ...

    def deserialize(self, data: bytes, keys: Keys, schema_uri: str) -> Document:
        ...


class JsonDocumentCodec:
    """Pretty-printed UTF-8 JSON codec for document content."""

    def serialize(self, document: Document) -> bytes:
        """Encode document content as JSON bytes.

        Args:
            document: Document to encode.

        Returns:
            UTF-8 JSON payload with a trailing newline.

        Raises:
            TypeError: If content holds values JSON cannot encode.
        """
        text = json.dumps(dict(document.content), indent=JSON_INDENT, sort_keys=True)
        return (text + "\n").encode("utf-8")

    def deserialize(self, data: bytes, keys: Keys, schema_uri: str) -> Document:
        """Decode JSON bytes into a document.

        Args:
            data: Stored payload.
            keys: Keys the document was requested with.
            schema_uri: Expected document schema.

        Returns:
            Decoded document without a file handle.

        Raises:
            ValueError: If payload is not a JSON object.
        """
        payload: Any = json.loads(data.decode("utf-8"))
        if not isinstance(payload, dict):
            raise ValueError("expected JSON object at top level")
        return Document(schema_uri=schema_uri, keys=keys, content=payload)
