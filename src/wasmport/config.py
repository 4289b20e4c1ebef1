# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration: defaults, ``pyproject.toml``, ``wasmport.toml``, CLI."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
CONFIG_FILENAME: Final[str] = "wasmport.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "wasmport"
PATH_KEYS: Final[frozenset[str]] = frozenset({"catalog_path"})

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class Config(BaseModel):
    """Effective settings used by the command line.

    ``preload_warning_bytes`` replaces the threshold of the catalog's
    preload-size signature when set.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    catalog_path: Path | None = None
    preload_warning_bytes: int | None = Field(default=None, ge=0)
    use_color: bool | None = None
    use_emoji: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain mapping."""

        return self.model_dump(mode="python")


class ConfigSource(Protocol):
    """Provider of one configuration layer."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the layer's settings keyed by field name."""
        ...


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return Config().to_dict()


class TomlConfigSource:
    """Load settings from a standalone TOML document."""

    def __init__(self, path: Path, *, name: str | None = None, env: Mapping[str, str] | None = None) -> None:
        self._path = path
        self.name = name or str(path)
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        document = self._read()
        return self._normalise(document)

    def _read(self) -> Mapping[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigError(f"{self._path}: invalid TOML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigError(f"Configuration at {self._path} must be a table")
        return data

    def _normalise(self, document: Mapping[str, Any]) -> dict[str, Any]:
        """Normalise key spelling, expand environment variables, and anchor relative paths."""

        result: dict[str, Any] = {}
        for key, value in _expand_env(document, self._env).items():
            field_name = key.replace("-", "_")
            if field_name in PATH_KEYS and isinstance(value, str):
                candidate = Path(value).expanduser()
                value = candidate if candidate.is_absolute() else (self._path.parent / candidate)
            result[field_name] = value
        return result


class PyProjectConfigSource(TomlConfigSource):
    """Read settings from ``[tool.wasmport]`` within ``pyproject.toml``."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        super().__init__(path, name=f"pyproject.toml ({path})", env=env)

    def load(self) -> Mapping[str, Any]:
        tool_section = self._read().get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return self._normalise(section)


class ConfigLoader:
    """Merge configuration layers from lowest to highest precedence."""

    def __init__(self, sources: Sequence[ConfigSource]) -> None:
        self._sources = tuple(sources)

    @classmethod
    def for_root(cls, root: Path, *, env: Mapping[str, str] | None = None) -> ConfigLoader:
        """Return a loader reading the standard files beneath ``root``."""

        return cls(
            (
                DefaultConfigSource(),
                PyProjectConfigSource(root / PYPROJECT_FILENAME, env=env),
                TomlConfigSource(root / CONFIG_FILENAME, env=env),
            ),
        )

    def load(self, overrides: Mapping[str, Any] | None = None) -> Config:
        """Return the effective configuration.

        Args:
            overrides: Highest-precedence values, typically from CLI options.
                ``None`` values are ignored.

        Returns:
            Config: Validated configuration.

        Raises:
            ConfigError: If a layer is unreadable or a value is invalid.
        """

        merged: dict[str, Any] = {}
        for source in self._sources:
            merged.update(source.load())
        if overrides:
            merged.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return Config.model_validate(merged)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in exc.errors()
            )
            raise ConfigError(f"invalid configuration: {problems}") from exc


def load_config(root: Path, overrides: Mapping[str, Any] | None = None) -> Config:
    """Load the configuration rooted at ``root`` with optional CLI ``overrides``."""

    return ConfigLoader.for_root(root).load(overrides)


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda match: env.get(match.group(1) or match.group(2), match.group(0)), value)
    if isinstance(value, Mapping):
        return {key: _expand_env_value(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(item, env) for item in value]
    return value


__all__ = [
    "CONFIG_FILENAME",
    "Config",
    "ConfigLoader",
    "ConfigSource",
    "DefaultConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_config",
]
