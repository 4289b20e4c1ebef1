# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rendering of stage command templates."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from ..catalog.model_catalog import FlagFormat, render_flag_value
from ..catalog.model_stage import PLACEHOLDER_PATTERN, BuildStage, StageKind
from ..catalog.types import FlagValue

_REPEATED_SPACES: Final[re.Pattern[str]] = re.compile(r" {2,}")


@dataclass(frozen=True, slots=True)
class CommandRenderer:
    """Substitute placeholders in stage commands.

    Supported placeholders:

    * ``{flags}``: rendered flags whose format applies to the stage kind.
    * ``{flags:<kind>}``: rendered flags applying to another stage kind.
    * ``{flag:<namespace>}``: raw value of one namespace, empty when unset.
    * ``{tool}``, ``{dependency}``, ``{stage}``: profile name, bound dependency, stage name.
    """

    merged_flags: Mapping[str, FlagValue]
    flag_formats: Mapping[str, FlagFormat]
    tool: str

    def flags_for(self, kind: StageKind) -> tuple[str, ...]:
        """Return the command-line arguments of every flag applying to ``kind``."""

        arguments: list[str] = []
        for namespace in sorted(self.merged_flags):
            flag_format = self.flag_formats.get(namespace)
            if flag_format is None or not flag_format.applies_to(kind):
                continue
            arguments.extend(flag_format.render(self.merged_flags[namespace]))
        return tuple(arguments)

    def render(self, stage: BuildStage) -> str:
        """Return the command of ``stage`` with every placeholder substituted."""

        def substitute(match: re.Match[str]) -> str:
            placeholder, argument = match.group(1), match.group(2)
            if placeholder == "flags":
                kind = stage.kind if argument is None else StageKind(argument)
                return " ".join(self.flags_for(kind))
            if placeholder == "flag":
                value = self.merged_flags.get(argument or "")
                return "" if value is None else render_flag_value(value)
            if placeholder == "tool":
                return self.tool
            if placeholder == "dependency":
                return stage.dependency or ""
            if placeholder == "stage":
                return stage.name
            return match.group(0)

        rendered = PLACEHOLDER_PATTERN.sub(substitute, stage.command_template)
        return _REPEATED_SPACES.sub(" ", rendered).strip()


__all__ = ["CommandRenderer"]
