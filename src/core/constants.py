"""Core constants used across symstore modules.

This module centralizes layout names and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".symstore")
DEFAULT_FILE_EXTENSION = ".json"
DEFAULT_FILE_HANDLE_SCHEMA_URI = "/org/symstore/model/Filed"
DATA_DIR_NAME = "data"
KEYS_DIR_NAME = "keys"
INDEX_SEGMENT = "index"
NULL_KEY_TEXT = "null"
URI_SCHEME_SEPARATOR = "://"
COMPOSITE_SLOT_SEPARATOR = "_"
COMPOSITE_KEY_SEPARATOR = "__"
JSON_INDENT = 2
DEFAULT_URI_PORTS = {
    "http": 80,
    "https": 443,
    "ftp": 21,
    "ws": 80,
    "wss": 443,
}
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
