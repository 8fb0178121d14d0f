"""Schema registry and YAML schema catalog loading.

This module supplies schema identity to the storage layer: the unique
name that becomes a directory path, and the declared key slot names
used to build and expand composite keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, cast
from urllib.parse import urlsplit

from core.errors import SymstoreDependencyError, SymstoreSchemaError
from core.types import CompositeKey, Keys, KeyValue, UniqueName, key_value_of


@dataclass(frozen=True)
class SchemaDefinition:
    """Declared schema identity and key slots.

    Attributes:
        uri: Schema URI.
        unique_name: Name mapped to the schema directory.
        key_slot_names: Ordered key slot names; several slots form a composite key.
        base_schema_uris: Schemas this one extends, searched for inherited key slots.
    """

    uri: str
    unique_name: UniqueName
    key_slot_names: tuple[str, ...] = ()
    base_schema_uris: tuple[str, ...] = ()


def unique_name_from_uri(schema_uri: str) -> UniqueName:
    """Derive a unique name from a schema URI path.

    Args:
        schema_uri: Absolute URI or bare slash-delimited path.

    Returns:
        Unique name built from the URI path segments.
    """
    parts = urlsplit(schema_uri)
    path = parts.path if parts.scheme else schema_uri
    return UniqueName.parse(path)


class SchemaRegistry:
    """In-memory registry of schema definitions keyed by URI."""

    def __init__(self, definitions: Iterable[SchemaDefinition] = ()) -> None:
        self._definitions: dict[str, SchemaDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: SchemaDefinition) -> None:
        """Add or replace a schema definition.

        Args:
            definition: Schema to register.

        Raises:
            SymstoreSchemaError: If key slot names repeat.
        """
        if len(set(definition.key_slot_names)) != len(definition.key_slot_names):
            raise SymstoreSchemaError(
                f"Schema {definition.uri} declares duplicate key slots "
                f"{list(definition.key_slot_names)}. Give each key slot a distinct name."
            )
        self._definitions[definition.uri] = definition

    def get(self, schema_uri: str) -> SchemaDefinition | None:
        return self._definitions.get(schema_uri)

    def unique_name(self, schema_uri: str) -> UniqueName:
        """Return the unique name for a schema, falling back to its URI path."""
        definition = self._definitions.get(schema_uri)
        if definition is not None:
            return definition.unique_name
        return unique_name_from_uri(schema_uri)

    def declared_key_slot_names(self, schema_uri: str) -> tuple[str, ...]:
        definition = self._definitions.get(schema_uri)
        if definition is None:
            return ()
        return definition.key_slot_names

    def build_keys(self, schema_uri: str, content: Mapping[str, Any]) -> Keys:
        """Assemble keys from document content and declared key slots.

        The document schema and all of its registered base schemas are
        visited in declaration order; each schema that declares key slots
        contributes one key when every slot has a value.

        Args:
            schema_uri: Document schema URI.
            content: Document content holding the key slot values.

        Returns:
            Keys keyed by the declaring schema URIs.
        """
        values: dict[str, KeyValue] = {}
        for definition in self._lineage(schema_uri):
            slot_names = definition.key_slot_names
            if not slot_names:
                continue
            slot_values = {name: content.get(name) for name in slot_names}
            if any(value is None for value in slot_values.values()):
                continue
            if len(slot_names) == 1:
                values[definition.uri] = key_value_of(slot_values[slot_names[0]])
            else:
                values[definition.uri] = CompositeKey(slots=slot_values)
        return Keys(values)

    def _lineage(self, schema_uri: str) -> list[SchemaDefinition]:
        visited: list[SchemaDefinition] = []
        pending = [schema_uri]
        seen: set[str] = set()
        while pending:
            uri = pending.pop(0)
            if uri in seen:
                continue
            seen.add(uri)
            definition = self._definitions.get(uri)
            if definition is None:
                continue
            visited.append(definition)
            pending.extend(definition.base_schema_uris)
        return visited


def load_schema_catalog(catalog_path: Path) -> SchemaRegistry:
    """Load a schema registry from a YAML catalog file.

    Args:
        catalog_path: Path to a YAML file with a top-level ``schemas`` list.

    Returns:
        Registry holding every catalog schema.

    Raises:
        SymstoreSchemaError: If the catalog is missing or malformed.
        SymstoreDependencyError: If PyYAML is not installed.
    """
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise SymstoreDependencyError(
            "Schema catalogs require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    catalog_file = Path(catalog_path).expanduser().resolve()
    if not catalog_file.exists():
        raise SymstoreSchemaError(
            f"Schema catalog does not exist at {catalog_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(catalog_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise SymstoreSchemaError(
            f"Failed to read schema catalog at {catalog_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise SymstoreSchemaError(
            f"Failed to parse schema catalog at {catalog_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if not isinstance(payload, dict) or not isinstance(payload.get("schemas"), list):
        raise SymstoreSchemaError(
            f"Schema catalog at {catalog_file} must be a mapping with a 'schemas' list."
        )
    return SchemaRegistry(_parse_definition(entry) for entry in payload["schemas"])


def _parse_definition(entry: object) -> SchemaDefinition:
    """Parse one catalog entry.

    Args:
        entry: Raw YAML entry.

    Returns:
        Typed schema definition.

    Raises:
        SymstoreSchemaError: If required fields are missing or mistyped.
    """
    if not isinstance(entry, dict) or not isinstance(entry.get("uri"), str):
        raise SymstoreSchemaError(
            f"Invalid schema catalog entry {entry!r}: expected a mapping with a string 'uri'."
        )
    uri = entry["uri"]
    unique_name_text = entry.get("unique_name")
    unique_name = (
        UniqueName.parse(str(unique_name_text)) if unique_name_text else unique_name_from_uri(uri)
    )
    return SchemaDefinition(
        uri=uri,
        unique_name=unique_name,
        key_slot_names=_string_tuple(entry.get("key_slots"), uri, "key_slots"),
        base_schema_uris=_string_tuple(entry.get("base"), uri, "base"),
    )


def _string_tuple(raw_value: object, uri: str, field_name: str) -> tuple[str, ...]:
    if raw_value is None:
        return ()
    if isinstance(raw_value, str):
        return (raw_value,)
    if isinstance(raw_value, list) and all(isinstance(item, str) for item in raw_value):
        return tuple(raw_value)
    raise SymstoreSchemaError(
        f"Schema {uri} has invalid '{field_name}': expected a string or list of strings."
    )
