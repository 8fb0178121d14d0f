"""Canonical scalar-to-text rendering.

This module turns scalar key values into the strings used for key
link file names. Rendering is deterministic for every supported type.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from pathlib import PurePath
from uuid import UUID

from core.types import UniqueName


def render_scalar(value: object) -> str | None:
    """Render a scalar key value to its canonical text form.

    Args:
        value: Scalar value to render.

    Returns:
        Canonical text, or None when the value is absent.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, PurePath):
        return value.as_posix()
    if isinstance(value, UniqueName):
        return value.full_name
    if isinstance(value, Enum):
        return value.name
    return str(value)
