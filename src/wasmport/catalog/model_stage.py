# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Build stage templates contributed by catalog rules."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Final

from ..errors import CatalogParseError
from ..profile.models import ToolProfile
from .types import JSONValue
from .utils import expect_string, optional_string, string_array

PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(r"\{([a-z]+)(?::([^{}]+))?\}")
DEPENDENCY_PLACEHOLDER: Final[str] = "{dependency}"
FOR_EACH_DEPENDENCY: Final[str] = "dependency"

_COMMAND_PLACEHOLDERS: Final[frozenset[str]] = frozenset({"flags", "flag", "tool", "dependency", "stage"})
_ARGUMENT_PLACEHOLDERS: Final[frozenset[str]] = frozenset({"flag", "flags"})


class StageKind(str, Enum):
    """Kinds of steps a build plan is made of."""

    FETCH_DEPENDENCY = "fetch-dependency"
    CONFIGURE = "configure"
    COMPILE = "compile"
    LINK = "link"


_STAGE_KIND_VALUES: Final[frozenset[str]] = frozenset(kind.value for kind in StageKind)


@dataclass(frozen=True, slots=True)
class BuildStage:
    """Concrete stage produced for a single resolution."""

    name: str
    kind: StageKind
    command_template: str
    depends_on: frozenset[str]
    dependency: str | None = None


@dataclass(frozen=True, slots=True)
class StageTemplate:
    """Stage declaration attached to a rule, optionally expanded per dependency."""

    name: str
    kind: StageKind
    command: str
    depends_on: tuple[str, ...]
    for_each: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, context: str) -> StageTemplate:
        """Build a stage template from a catalog stage object.

        Raises:
            CatalogParseError: If the stage is malformed.
        """

        name = expect_string(data.get("name"), key="name", context=context)
        raw_kind = expect_string(data.get("kind"), key="kind", context=context)
        try:
            kind = StageKind(raw_kind)
        except ValueError as exc:
            raise CatalogParseError(f"{context}: unknown stage kind '{raw_kind}'") from exc
        command = expect_string(data.get("command"), key="command", context=context)
        depends_on = string_array(data.get("dependsOn"), key="dependsOn", context=context)
        for_each = optional_string(data.get("forEach"), key="forEach", context=context)
        if for_each is not None and for_each != FOR_EACH_DEPENDENCY:
            raise CatalogParseError(f"{context}: unsupported forEach '{for_each}'")
        template = cls(name=name, kind=kind, command=command, depends_on=depends_on, for_each=for_each)
        template._validate_placeholders(context=context)
        return template

    def _validate_placeholders(self, *, context: str) -> None:
        """Reject command placeholders the renderer does not understand."""

        for match in PLACEHOLDER_PATTERN.finditer(self.command):
            placeholder, argument = match.group(1), match.group(2)
            if placeholder not in _COMMAND_PLACEHOLDERS:
                raise CatalogParseError(f"{context}: unknown placeholder '{match.group(0)}' in command")
            if argument is not None and placeholder not in _ARGUMENT_PLACEHOLDERS:
                raise CatalogParseError(f"{context}: placeholder '{match.group(0)}' takes no argument")
            if placeholder == "flags" and argument is not None and argument not in _STAGE_KIND_VALUES:
                raise CatalogParseError(f"{context}: '{match.group(0)}' must name a stage kind")
            if placeholder == "flag" and argument is None:
                raise CatalogParseError(f"{context}: placeholder '{{flag}}' requires a namespace")
        uses_dependency = any(
            DEPENDENCY_PLACEHOLDER in text for text in (self.name, self.command, *self.depends_on)
        )
        if uses_dependency and self.for_each != FOR_EACH_DEPENDENCY:
            raise CatalogParseError(f"{context}: '{{dependency}}' requires forEach 'dependency'")
        if self.for_each == FOR_EACH_DEPENDENCY and DEPENDENCY_PLACEHOLDER not in self.name:
            raise CatalogParseError(f"{context}: per-dependency stage names must contain '{{dependency}}'")

    def expand(self, profile: ToolProfile) -> tuple[BuildStage, ...]:
        """Return the concrete stages this template contributes for ``profile``."""

        if self.for_each != FOR_EACH_DEPENDENCY:
            return (
                BuildStage(
                    name=self.name,
                    kind=self.kind,
                    command_template=self.command,
                    depends_on=frozenset(self.depends_on),
                ),
            )
        stages: list[BuildStage] = []
        for dependency in profile.compiled_dependencies:
            stages.append(
                BuildStage(
                    name=self.name.replace(DEPENDENCY_PLACEHOLDER, dependency.name),
                    kind=self.kind,
                    command_template=self.command.replace(DEPENDENCY_PLACEHOLDER, dependency.name),
                    depends_on=frozenset(
                        item.replace(DEPENDENCY_PLACEHOLDER, dependency.name) for item in self.depends_on
                    ),
                    dependency=dependency.name,
                ),
            )
        return tuple(stages)


__all__ = ["BuildStage", "StageKind", "StageTemplate"]
