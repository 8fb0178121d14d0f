"""Parsing of ``--key SCHEMA=VALUE`` command-line options."""

from __future__ import annotations

import argparse
from typing import Sequence

from core.schema import SchemaRegistry
from core.types import CompositeKey, Keys, KeyValue, key_value_of


def parse_key_options(options: Sequence[str], registry: SchemaRegistry) -> Keys:
    """Build keys from repeated ``SCHEMA=VALUE`` options.

    Schemas declaring several key slots take ``slot:value,slot:value``.

    Args:
        options: Raw option values in command-line order.
        registry: Schema registry used to detect composite keys.

    Returns:
        Parsed keys.

    Raises:
        argparse.ArgumentTypeError: If an option is malformed.
    """
    values: dict[str, KeyValue] = {}
    for option in options:
        schema_uri, separator, raw_value = option.partition("=")
        if not separator or not schema_uri.strip():
            raise argparse.ArgumentTypeError(
                f"Invalid --key '{option}': expected KEY_SCHEMA=VALUE."
            )
        if len(registry.declared_key_slot_names(schema_uri)) > 1:
            values[schema_uri] = _parse_composite(option, raw_value)
        else:
            values[schema_uri] = key_value_of(raw_value)
    return Keys(values)


def _parse_composite(option: str, raw_value: str) -> CompositeKey:
    slots: dict[str, str] = {}
    for part in raw_value.split(","):
        slot_name, separator, slot_value = part.partition(":")
        if not separator or not slot_name.strip():
            raise argparse.ArgumentTypeError(
                f"Invalid composite --key '{option}': expected slot:value,slot:value."
            )
        slots[slot_name.strip()] = slot_value
    return CompositeKey(slots=slots)
