"""Unit tests for schema registry and catalog loading."""

from __future__ import annotations

import pytest

from core.errors import SymstoreSchemaError
from core.schema import (
    SchemaDefinition,
    SchemaRegistry,
    load_schema_catalog,
    unique_name_from_uri,
)
from core.types import CompositeKey, ScalarKey, UniqueName, UriKey

_CATALOG = """\
schemas:
  - uri: http://schema.example.com/com/example/shape/Shape
    key_slots: [id]
  - uri: http://schema.example.com/com/example/shape/Circle
    base: http://schema.example.com/com/example/shape/Shape
  - uri: http://schema.example.com/com/example/Person
    unique_name: com/example/people/Person
    key_slots: [first, last]
"""


def _registry() -> SchemaRegistry:
    shape = SchemaDefinition(
        uri="/demo/Shape",
        unique_name=UniqueName.parse("demo/Shape"),
        key_slot_names=("id",),
    )
    circle = SchemaDefinition(
        uri="/demo/Circle",
        unique_name=UniqueName.parse("demo/Circle"),
        key_slot_names=("uri",),
        base_schema_uris=("/demo/Shape",),
    )
    person = SchemaDefinition(
        uri="/demo/Person",
        unique_name=UniqueName.parse("demo/Person"),
        key_slot_names=("first", "last"),
    )
    return SchemaRegistry([shape, circle, person])


def test_unique_name_from_uri_uses_uri_path() -> None:
    """Absolute schema URIs should map through their path."""
    name = unique_name_from_uri("http://schema.example.com/com/example/shape/Circle")

    assert name.full_name == "com/example/shape/Circle"


def test_unique_name_falls_back_for_unregistered_schema() -> None:
    """Unregistered schemas should still get a deterministic unique name."""
    assert SchemaRegistry().unique_name("/demo/Other").full_name == "demo/Other"


def test_register_rejects_duplicate_slots() -> None:
    """Key slots must be distinct."""
    definition = SchemaDefinition(
        uri="/demo/Bad",
        unique_name=UniqueName.parse("demo/Bad"),
        key_slot_names=("id", "id"),
    )

    with pytest.raises(SymstoreSchemaError):
        SchemaRegistry([definition])


def test_build_keys_collects_base_schema_keys() -> None:
    """Keys should include slots declared by base schemas."""
    keys = _registry().build_keys("/demo/Circle", {"id": "42", "uri": "http://example.com/c"})

    assert keys.value("/demo/Shape") == ScalarKey("42") and keys.value("/demo/Circle") == UriKey(
        "http://example.com/c"
    )


def test_build_keys_skips_missing_slot_values() -> None:
    """A schema whose slot value is absent should contribute no key."""
    keys = _registry().build_keys("/demo/Circle", {"id": "42"})

    assert keys.schema_uris == ("/demo/Shape",)


def test_build_keys_makes_composite_for_multiple_slots() -> None:
    """Several declared slots should form a composite key."""
    keys = _registry().build_keys("/demo/Person", {"first": "Ada", "last": "Lovelace"})

    assert keys.value("/demo/Person") == CompositeKey(slots={"first": "Ada", "last": "Lovelace"})


def test_load_schema_catalog_reads_definitions(tmp_path) -> None:
    """Catalog entries should become registered schema definitions."""
    catalog_path = tmp_path / "schemas.yaml"
    catalog_path.write_text(_CATALOG, encoding="utf-8")

    registry = load_schema_catalog(catalog_path)

    assert registry.declared_key_slot_names("http://schema.example.com/com/example/Person") == (
        "first",
        "last",
    )


def test_load_schema_catalog_honors_unique_name_override(tmp_path) -> None:
    """An explicit unique name should replace the URI-derived one."""
    catalog_path = tmp_path / "schemas.yaml"
    catalog_path.write_text(_CATALOG, encoding="utf-8")

    registry = load_schema_catalog(catalog_path)

    assert (
        registry.unique_name("http://schema.example.com/com/example/Person").full_name
        == "com/example/people/Person"
    )


def test_load_schema_catalog_raises_for_missing_file(tmp_path) -> None:
    """Missing catalogs should fail with a schema error."""
    with pytest.raises(SymstoreSchemaError):
        load_schema_catalog(tmp_path / "missing.yaml")


def test_load_schema_catalog_raises_for_missing_schemas_list(tmp_path) -> None:
    """Catalogs without a schemas list should be rejected."""
    catalog_path = tmp_path / "schemas.yaml"
    catalog_path.write_text("version: 1\n", encoding="utf-8")

    with pytest.raises(SymstoreSchemaError):
        load_schema_catalog(catalog_path)


def test_load_schema_catalog_raises_for_entry_without_uri(tmp_path) -> None:
    """Every catalog entry needs a string uri."""
    catalog_path = tmp_path / "schemas.yaml"
    catalog_path.write_text("schemas:\n  - key_slots: [id]\n", encoding="utf-8")

    with pytest.raises(SymstoreSchemaError):
        load_schema_catalog(catalog_path)
