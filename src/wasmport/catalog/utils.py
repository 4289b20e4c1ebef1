# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Utility helpers for validating and normalising catalog JSON structures."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..errors import CatalogParseError
from ..profile.capabilities import split_capability
from .types import FlagValue, JSONValue


def expect_string(value: JSONValue | None, *, key: str, context: str) -> str:
    """Return ``value`` coerced to ``str`` or raise a catalog error.

    Args:
        value: Raw JSON value extracted from the catalog payload.
        key: Attribute name used in error messages.
        context: Human-friendly prefix describing the validation context.

    Returns:
        str: Value coerced to a string.

    Raises:
        CatalogParseError: If ``value`` is not a non-empty string.
    """
    if not isinstance(value, str) or not value:
        raise CatalogParseError(f"{context}: expected '{key}' to be a non-empty string")
    return value


def optional_string(value: JSONValue | None, *, key: str, context: str) -> str | None:
    """Return ``value`` as an optional string with validation.

    Raises:
        CatalogParseError: If ``value`` is present but not a string.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise CatalogParseError(f"{context}: expected '{key}' to be a string if present")
    return value


def expect_int(value: JSONValue | None, *, key: str, context: str, default: int | None = None) -> int:
    """Return ``value`` as an integer, falling back to ``default`` when absent.

    Raises:
        CatalogParseError: If ``value`` is not an integer, or is absent without a default.
    """
    if value is None:
        if default is None:
            raise CatalogParseError(f"{context}: expected '{key}' to be an integer")
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise CatalogParseError(f"{context}: expected '{key}' to be an integer")
    return value


def string_array(value: JSONValue | None, *, key: str, context: str) -> tuple[str, ...]:
    """Return ``value`` as a tuple of strings with validation.

    Args:
        value: Raw JSON value extracted from the catalog payload.
        key: Attribute name used in error messages.
        context: Human-friendly prefix describing the validation context.

    Returns:
        tuple[str, ...]: Tuple containing all string entries from ``value``.

    Raises:
        CatalogParseError: If ``value`` is not a sequence of strings.
    """
    if value is None:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise CatalogParseError(f"{context}: expected '{key}' to be an array of strings")
    result: list[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            raise CatalogParseError(f"{context}: expected '{key}[{index}]' to be a string")
        result.append(item)
    return tuple(result)


def capability_array(value: JSONValue | None, *, key: str, context: str) -> tuple[str, ...]:
    """Return ``value`` as a tuple of well-formed capability keys.

    Raises:
        CatalogParseError: If any entry is not a ``kind:value`` capability key.
    """
    entries = string_array(value, key=key, context=context)
    for entry in entries:
        try:
            split_capability(entry)
        except ValueError as exc:
            raise CatalogParseError(f"{context}: {exc}") from exc
    return entries


def expect_mapping(value: JSONValue | None, *, key: str, context: str) -> Mapping[str, JSONValue]:
    """Return ``value`` as a mapping of JSON values or raise an error.

    Raises:
        CatalogParseError: If ``value`` is not a mapping.
    """
    if not isinstance(value, Mapping):
        raise CatalogParseError(f"{context}: expected '{key}' to be an object")
    return value


def optional_mapping(value: JSONValue | None, *, key: str, context: str) -> Mapping[str, JSONValue]:
    """Return ``value`` as a mapping, treating ``None`` as empty."""

    if value is None:
        return {}
    return expect_mapping(value, key=key, context=context)


def object_array(value: JSONValue | None, *, key: str, context: str) -> tuple[Mapping[str, JSONValue], ...]:
    """Return ``value`` as a tuple of JSON objects.

    Raises:
        CatalogParseError: If ``value`` is not an array of objects.
    """
    if value is None:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise CatalogParseError(f"{context}: expected '{key}' to be an array")
    return tuple(
        expect_mapping(item, key=f"{key}[{index}]", context=context) for index, item in enumerate(value)
    )


def flag_value(value: JSONValue | None, *, key: str, context: str) -> FlagValue:
    """Return ``value`` as a flag value (scalar or array of strings).

    Raises:
        CatalogParseError: If ``value`` is null, an object, or a mixed array.
    """
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return string_array(value, key=key, context=context)
    raise CatalogParseError(f"{context}: expected '{key}' to be a scalar or an array of strings")


__all__ = [
    "capability_array",
    "expect_int",
    "expect_mapping",
    "expect_string",
    "flag_value",
    "object_array",
    "optional_mapping",
    "optional_string",
    "string_array",
]
