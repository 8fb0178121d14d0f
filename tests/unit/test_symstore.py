"""Scenario tests through the public symstore surface."""

from __future__ import annotations

from dataclasses import replace
import json
import os

from symstore import Document, Keys, SchemaDefinition, SchemaRegistry, StorageEngine, SymstoreConfig, UniqueName

_SHAPE = "http://schema.example.com/com/example/shape/Shape"


def test_shape_document_layout(tmp_path) -> None:
    """A Shape keyed by id 42 should land in data/ with a keys/42.json link."""
    shape = SchemaDefinition(
        uri=_SHAPE,
        unique_name=UniqueName.parse("com/example/shape/Shape"),
        key_slot_names=("id",),
    )
    registry = SchemaRegistry([shape])
    engine = StorageEngine(replace(SymstoreConfig.from_env(), data_root=tmp_path), registry=registry)
    keys = registry.build_keys(_SHAPE, {"id": "42"})

    engine.save(Document(schema_uri=_SHAPE, keys=keys, content={"r": 5}))

    shape_dir = tmp_path / "com" / "example" / "shape" / "Shape"
    (data_path,) = list((shape_dir / "data").iterdir())
    link_path = shape_dir / "keys" / "42.json"
    assert json.loads(data_path.read_text(encoding="utf-8")) == {"r": 5}
    assert os.readlink(link_path) == os.path.join("..", "data", data_path.name)
    assert engine.get(Keys.of({_SHAPE: "42"}), _SHAPE).content == {"r": 5}
