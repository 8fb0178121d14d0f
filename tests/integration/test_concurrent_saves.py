"""Integration tests for concurrent saves on one store root."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from core.config import SymstoreConfig
from core.types import Document, Keys
from store.storage_engine import StorageEngine

_SHAPE = "/demo/Shape"
_TAG = "/demo/Tag"


def test_concurrent_saves_of_same_keys_share_one_data_file(tmp_path) -> None:
    """Racing saves of one document should converge on a single data file."""
    config = replace(SymstoreConfig.from_env(), data_root=tmp_path, schema_catalog=None)
    engine = StorageEngine(config)

    def _save(index: int) -> None:
        keys = Keys.of({_SHAPE: "42", _TAG: "round"})
        engine.save(Document(schema_uri=_SHAPE, keys=keys, content={"r": index}))

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(_save, range(32)))

    data_files = list((tmp_path / "demo" / "Shape" / "data").iterdir())
    assert len(data_files) == 1 and engine.resolve(Keys.of({_TAG: "round"})) == data_files[0]


def test_concurrent_saves_of_distinct_keys_stay_separate(tmp_path) -> None:
    """Documents with distinct keys should each get their own data file."""
    config = replace(SymstoreConfig.from_env(), data_root=tmp_path, schema_catalog=None)
    engine = StorageEngine(config)

    def _save(index: int) -> None:
        keys = Keys.of({_SHAPE: str(index)})
        engine.save(Document(schema_uri=_SHAPE, keys=keys, content={"r": index}))

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(_save, range(16)))

    loaded = [engine.get(Keys.of({_SHAPE: str(index)}), _SHAPE).content["r"] for index in range(16)]
    assert loaded == list(range(16))
