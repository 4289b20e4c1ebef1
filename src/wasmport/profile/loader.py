# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Read tool profiles and source signals from JSON or TOML documents."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from ..errors import ProfileError
from .models import SourceSignals, ToolProfile

_TOML_SUFFIXES: Final[frozenset[str]] = frozenset({".toml"})


def read_document(path: Path) -> Mapping[str, Any]:
    """Return the top-level object stored in ``path``.

    Args:
        path: JSON or TOML document on disk.

    Returns:
        Mapping[str, Any]: Parsed document.

    Raises:
        ProfileError: If the file is missing, unparsable, or not an object.
    """

    if not path.is_file():
        raise ProfileError(f"{path}: file not found")
    try:
        if path.suffix.lower() in _TOML_SUFFIXES:
            with path.open("rb") as handle:
                payload: Any = tomllib.load(handle)
        else:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ProfileError(f"{path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ProfileError(f"{path}: expected a top-level object")
    return payload


def profile_from_mapping(data: Mapping[str, Any], *, context: str = "<profile>") -> ToolProfile:
    """Validate ``data`` into a :class:`ToolProfile`.

    Raises:
        ProfileError: If ``data`` does not describe a valid profile.
    """

    try:
        return ToolProfile.model_validate(dict(data))
    except ValidationError as exc:
        raise ProfileError(f"{context}: {_summarise(exc)}") from exc


def signals_from_mapping(data: Mapping[str, Any], *, context: str = "<signals>") -> SourceSignals:
    """Validate ``data`` into :class:`SourceSignals`.

    Raises:
        ProfileError: If ``data`` does not describe valid source signals.
    """

    try:
        return SourceSignals.model_validate(dict(data))
    except ValidationError as exc:
        raise ProfileError(f"{context}: {_summarise(exc)}") from exc


def load_profile(path: Path) -> ToolProfile:
    """Load and validate a tool profile stored at ``path``."""

    return profile_from_mapping(read_document(path), context=str(path))


def load_signals(path: Path) -> SourceSignals:
    """Load and validate a source-signal document stored at ``path``."""

    return signals_from_mapping(read_document(path), context=str(path))


def _summarise(exc: ValidationError) -> str:
    """Flatten pydantic validation errors into a single line."""

    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


__all__ = [
    "load_profile",
    "load_signals",
    "profile_from_mapping",
    "read_document",
    "signals_from_mapping",
]
