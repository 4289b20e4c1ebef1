# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared type aliases and constants for the pattern catalog."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]
FlagValue: TypeAlias = str | int | float | bool | tuple[str, ...]

CATALOG_SCHEMA_FILENAME: Final[str] = "catalog.schema.json"
DEFAULT_CATALOG_FILENAME: Final[str] = "catalog.json"

__all__ = [
    "CATALOG_SCHEMA_FILENAME",
    "DEFAULT_CATALOG_FILENAME",
    "FlagValue",
    "JSONPrimitive",
    "JSONValue",
]
