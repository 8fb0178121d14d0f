"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import SymstoreConfig, normalize_file_extension
from core.errors import SymstoreConfigError


def test_from_env_reads_data_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve data root from environment."""
    monkeypatch.setenv("SYMSTORE_DATA_ROOT", "./.tmp-symstore")

    config = SymstoreConfig.from_env()

    assert config.data_root.name == ".tmp-symstore" and config.data_root.is_absolute()


def test_from_env_defaults_to_json_extension(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should default to the JSON file extension."""
    monkeypatch.delenv("SYMSTORE_FILE_EXTENSION", raising=False)

    config = SymstoreConfig.from_env()

    assert config.file_extension == ".json"


def test_from_env_normalizes_extension_without_dot(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should add the leading dot to a bare extension."""
    monkeypatch.setenv("SYMSTORE_FILE_EXTENSION", "yaml")

    config = SymstoreConfig.from_env()

    assert config.file_extension == ".yaml"


def test_from_env_reads_schema_catalog(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Config should resolve the optional schema catalog path."""
    monkeypatch.setenv("SYMSTORE_SCHEMA_CATALOG", str(tmp_path / "schemas.yaml"))

    config = SymstoreConfig.from_env()

    assert config.schema_catalog == (tmp_path / "schemas.yaml").resolve()


def test_from_env_raises_for_blank_handle_schema(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a blank file handle schema."""
    monkeypatch.setenv("SYMSTORE_FILE_HANDLE_SCHEMA", "  ")

    with pytest.raises(SymstoreConfigError):
        SymstoreConfig.from_env()


@pytest.mark.parametrize("raw_value", ["", ".", "a/b", "  "])
def test_normalize_file_extension_rejects_invalid_values(raw_value: str) -> None:
    """Extension validation should reject blank and path-like values."""
    with pytest.raises(SymstoreConfigError):
        normalize_file_extension(raw_value)


def test_from_env_reads_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should accept stdlib level names case-insensitively."""
    monkeypatch.setenv("SYMSTORE_LOG_LEVEL", "debug")

    config = SymstoreConfig.from_env()

    assert config.log_level == "DEBUG"


def test_from_env_raises_for_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for unknown level names."""
    monkeypatch.setenv("SYMSTORE_LOG_LEVEL", "chatty")

    with pytest.raises(SymstoreConfigError):
        SymstoreConfig.from_env()
