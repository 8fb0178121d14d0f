"""Shared typed models.

This module defines immutable key, name, and document models used by
the schema, codec, and store layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Mapping, Union

from core.constants import (
    COMPOSITE_KEY_SEPARATOR,
    COMPOSITE_SLOT_SEPARATOR,
    URI_SCHEME_SEPARATOR,
)


@dataclass(frozen=True, order=True)
class UniqueName:
    """Slash-delimited schema name made of a namespace and a local name.

    Attributes:
        namespace: Slash-separated namespace path without outer slashes.
        local_name: Final name segment.
    """

    namespace: str
    local_name: str

    @classmethod
    def parse(cls, text: str) -> "UniqueName":
        """Parse ``namespace/segments/LocalName`` text.

        Args:
            text: Unique name text, optionally with outer slashes.

        Returns:
            Parsed unique name.
        """
        stripped = text.strip().strip("/")
        if "/" not in stripped:
            return cls(namespace="", local_name=stripped)
        namespace, local_name = stripped.rsplit("/", 1)
        return cls(namespace=namespace, local_name=local_name)

    @property
    def full_name(self) -> str:
        """Return ``namespace/local_name`` or the bare local name."""
        if not self.namespace:
            return self.local_name
        return f"{self.namespace}/{self.local_name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class ScalarKey:
    """Key value rendered through the scalar syntax rule."""

    value: Any


@dataclass(frozen=True)
class UriKey:
    """Key value that is a URI and maps to host/port/path segments."""

    uri: str


@dataclass(frozen=True)
class CompositeKey:
    """Key value made of named sub-slot scalars.

    Attributes:
        slots: Ordered mapping of slot name to scalar value.
    """

    slots: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "slots", dict(self.slots))

    def __hash__(self) -> int:
        return hash(tuple((name, str(value)) for name, value in self.slots.items()))

    def __str__(self) -> str:
        return COMPOSITE_KEY_SEPARATOR.join(
            f"{name}{COMPOSITE_SLOT_SEPARATOR}{value}" for name, value in self.slots.items()
        )


KeyValue = Union[ScalarKey, UriKey, CompositeKey]


def key_value_of(raw_value: object) -> KeyValue:
    """Lift a raw Python value into the key value variant.

    Args:
        raw_value: Existing variant, mapping, URI string, or scalar.

    Returns:
        Matching key value variant.
    """
    if isinstance(raw_value, (ScalarKey, UriKey, CompositeKey)):
        return raw_value
    if isinstance(raw_value, Mapping):
        return CompositeKey(slots=raw_value)
    if isinstance(raw_value, str) and URI_SCHEME_SEPARATOR in raw_value:
        return UriKey(uri=raw_value)
    return ScalarKey(value=raw_value)


class Keys:
    """Immutable, insertion-ordered set of key values unique by key schema URI."""

    def __init__(self, values: Mapping[str, KeyValue] | None = None) -> None:
        self._values: dict[str, KeyValue] = dict(values or {})

    @classmethod
    def of(cls, mapping: Mapping[str, object]) -> "Keys":
        """Build keys from raw values keyed by key schema URI."""
        return cls({schema_uri: key_value_of(value) for schema_uri, value in mapping.items()})

    @property
    def schema_uris(self) -> tuple[str, ...]:
        return tuple(self._values)

    def value(self, schema_uri: str) -> KeyValue | None:
        return self._values.get(schema_uri)

    def with_key(self, schema_uri: str, value: object) -> "Keys":
        """Return a copy with one key added or replaced."""
        updated = dict(self._values)
        updated[schema_uri] = key_value_of(value)
        return Keys(updated)

    def without(self, schema_uri: str) -> "Keys":
        """Return a copy without the given key schema."""
        return Keys({uri: value for uri, value in self._values.items() if uri != schema_uri})

    def __contains__(self, schema_uri: object) -> bool:
        return schema_uri in self._values

    def __iter__(self) -> Iterator[tuple[str, KeyValue]]:
        return iter(self._values.items())

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keys):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(tuple(self._values.items()))

    def __repr__(self) -> str:
        return f"Keys({self._values!r})"


@dataclass(frozen=True)
class Document:
    """Typed document persisted by the storage engine.

    Attributes:
        schema_uri: Type identity of the document.
        keys: Key values identifying the document.
        content: JSON-compatible document state.
        file_handle: Known data-file path, when already persisted.
    """

    schema_uri: str
    keys: Keys
    content: Mapping[str, Any] = field(default_factory=dict)
    file_handle: Path | None = None
