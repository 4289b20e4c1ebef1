# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Immutable build plan models and their JSON rendering."""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..catalog.model_stage import StageKind
from ..catalog.types import FlagValue
from ..linting.diagnostics import Diagnostic


class ResolvedStage(BaseModel):
    """Build stage with its command fully rendered."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    kind: StageKind
    command: str
    depends_on: tuple[str, ...] = Field(default_factory=tuple, alias="dependsOn")
    dependency: str | None = None
    rule: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Return the published JSON form of the stage."""

        payload: dict[str, object] = {
            "name": self.name,
            "kind": self.kind.value,
            "command": self.command,
            "dependsOn": sorted(self.depends_on),
        }
        if self.dependency is not None:
            payload["dependency"] = self.dependency
        return payload


class BuildPlan(BaseModel):
    """Resolver output: ordered stages, merged flags, diagnostics, and readiness."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tool: str
    stages: tuple[ResolvedStage, ...]
    merged_flags: Mapping[str, FlagValue] = Field(default_factory=dict, alias="mergedFlags", validate_default=True)
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)
    ready: bool
    catalog_version: str = Field(alias="catalogVersion")
    catalog_checksum: str = Field(alias="catalogChecksum")
    flag_origins: Mapping[str, str] = Field(default_factory=dict, alias="flagOrigins", validate_default=True)

    @field_validator("merged_flags", "flag_origins")
    @classmethod
    def _read_only(cls, value: Mapping[str, object]) -> Mapping[str, object]:
        """Store namespace mappings as sorted read-only views."""

        return MappingProxyType({namespace: value[namespace] for namespace in sorted(value)})

    @property
    def blocking(self) -> tuple[Diagnostic, ...]:
        """Return the diagnostics that keep the plan from being ready."""

        return tuple(diagnostic for diagnostic in self.diagnostics if diagnostic.is_blocking)

    def stage(self, name: str) -> ResolvedStage:
        """Return the stage called ``name``.

        Raises:
            KeyError: If the plan has no such stage.
        """

        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-ready mapping with a stable key order."""

        return {
            "tool": self.tool,
            "ready": self.ready,
            "catalog": {"version": self.catalog_version, "checksum": self.catalog_checksum},
            "mergedFlags": {
                namespace: _json_value(self.merged_flags[namespace]) for namespace in sorted(self.merged_flags)
            },
            "flagOrigins": {namespace: self.flag_origins[namespace] for namespace in sorted(self.flag_origins)},
            "stages": [stage.to_dict() for stage in self.stages],
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialise the plan deterministically."""

        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def _json_value(value: FlagValue) -> object:
    if isinstance(value, tuple):
        return list(value)
    return value


__all__ = ["BuildPlan", "ResolvedStage"]
