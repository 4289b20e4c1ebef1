# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""I/O helpers for reading catalog JSON documents and schemas."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import cast

from ..errors import CatalogParseError
from .types import JSONValue


def load_schema(path: Path) -> Mapping[str, JSONValue]:
    """Load a JSON schema from disk and ensure it is a JSON object.

    Args:
        path: Filesystem path to the schema file.

    Returns:
        Mapping[str, JSONValue]: Parsed JSON schema mapping.

    Raises:
        CatalogParseError: If the schema is missing, cannot be parsed, or is not a JSON object.
    """
    return _ensure_json_object(_read_json(path, kind="JSON schema"), context=str(path))


def load_document(path: Path) -> Mapping[str, JSONValue]:
    """Load a catalog document from disk and validate the payload.

    Args:
        path: Filesystem path to the JSON document.

    Returns:
        Mapping[str, JSONValue]: Parsed catalog document.

    Raises:
        CatalogParseError: If the document is missing, cannot be parsed, or is not a JSON object.
    """
    return _ensure_json_object(_read_json(path, kind="catalog JSON"), context=str(path))


def _read_json(path: Path, *, kind: str) -> JSONValue:
    """Return the parsed JSON payload stored at ``path``."""

    if not path.is_file():
        raise CatalogParseError(f"{path}: file not found")
    with path.open("r", encoding="utf-8") as stream:
        try:
            return cast(JSONValue, json.load(stream))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CatalogParseError(f"{path}: failed to parse {kind}: {exc}") from exc


__all__ = ["load_document", "load_schema"]


def _ensure_json_object(value: JSONValue, *, context: str) -> Mapping[str, JSONValue]:
    """Ensure ``value`` is a JSON object, raising on type mismatch.

    Args:
        value: Parsed JSON payload to validate.
        context: Human-readable context string used in error messages.

    Returns:
        Mapping[str, JSONValue]: Validated JSON object.

    Raises:
        CatalogParseError: If ``value`` is not a mapping.
    """

    mapping = _ensure_json_value(value, context=context)
    if not isinstance(mapping, Mapping):
        raise CatalogParseError(f"{context}: expected a JSON object")
    return mapping


def _ensure_json_value(value: JSONValue, *, context: str) -> JSONValue:
    """Ensure ``value`` is composed of JSON-compatible structures."""

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): _ensure_json_value(item, context=f"{context}.{key}") for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_ensure_json_value(item, context=f"{context}[]") for item in value]
    raise CatalogParseError(f"{context}: value is not valid JSON")
