# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rule definitions mapping profile traits to flags and build stages."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Final

from ..errors import CatalogParseError
from ..profile.models import ToolProfile
from .model_predicate import Predicate
from .model_stage import StageTemplate
from .types import FlagValue, JSONValue
from .utils import (
    expect_int,
    expect_string,
    flag_value,
    object_array,
    optional_mapping,
    optional_string,
)

NAMESPACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)*$")
BINDING_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\$\{([A-Za-z]+)\}$")

ProfileBinding = Callable[[ToolProfile], FlagValue | None]

PROFILE_BINDINGS: Final[Mapping[str, ProfileBinding]] = {
    "name": lambda profile: profile.name,
    "asyncImports": lambda profile: profile.async_imports,
    "memoryHint": lambda profile: profile.memory_hint,
    "preloadAssets": lambda profile: tuple(asset.path for asset in profile.preload_assets),
}


def validate_namespace(namespace: str, *, context: str) -> str:
    """Return ``namespace`` when it is a dotted flag namespace.

    Raises:
        CatalogParseError: If ``namespace`` contains unsupported characters.
    """

    if not NAMESPACE_PATTERN.match(namespace):
        raise CatalogParseError(f"{context}: invalid flag namespace '{namespace}'")
    return namespace


@dataclass(frozen=True, slots=True)
class FlagEntry:
    """Single ``namespace = value`` contribution of a rule."""

    namespace: str
    value: FlagValue

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, context: str) -> FlagEntry:
        """Build a flag entry from a catalog ``flags[]`` object.

        Raises:
            CatalogParseError: If the namespace or value is malformed.
        """

        namespace = validate_namespace(
            expect_string(data.get("namespace"), key="namespace", context=context),
            context=context,
        )
        value = flag_value(data.get("value"), key="value", context=context)
        binding = cls._binding_name(value)
        if binding is not None and binding not in PROFILE_BINDINGS:
            raise CatalogParseError(f"{context}: unknown profile binding '${{{binding}}}'")
        return cls(namespace=namespace, value=value)

    @staticmethod
    def _binding_name(value: FlagValue) -> str | None:
        """Return the profile field named by ``value`` when it is a binding."""

        if not isinstance(value, str):
            return None
        match = BINDING_PATTERN.match(value)
        return match.group(1) if match else None

    def resolve(self, profile: ToolProfile) -> FlagValue | None:
        """Return the concrete value for ``profile``; ``None`` when a binding is unset."""

        binding = self._binding_name(self.value)
        if binding is None:
            return self.value
        return PROFILE_BINDINGS[binding](profile)


@dataclass(frozen=True, slots=True)
class RuleDefinition:
    """Immutable catalog rule."""

    identifier: str
    description: str
    priority: int
    predicate: Predicate
    flags: tuple[FlagEntry, ...]
    stages: tuple[StageTemplate, ...]
    index: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, index: int, context: str) -> RuleDefinition:
        """Build a rule from a catalog ``rules[]`` object.

        Args:
            data: Raw rule mapping.
            index: Declaration position of the rule within the catalog.
            context: Human-friendly prefix used in error messages.

        Returns:
            RuleDefinition: Parsed rule.

        Raises:
            CatalogParseError: If the rule or any of its parts is malformed.
        """

        identifier = expect_string(data.get("id"), key="id", context=context)
        rule_context = f"{context}[{identifier}]"
        when = optional_mapping(data.get("when"), key="when", context=rule_context)
        flags = tuple(
            FlagEntry.from_mapping(entry, context=f"{rule_context}.flags[{position}]")
            for position, entry in enumerate(object_array(data.get("flags"), key="flags", context=rule_context))
        )
        stages = tuple(
            StageTemplate.from_mapping(entry, context=f"{rule_context}.stages[{position}]")
            for position, entry in enumerate(object_array(data.get("stages"), key="stages", context=rule_context))
        )
        return cls(
            identifier=identifier,
            description=optional_string(data.get("description"), key="description", context=rule_context) or "",
            priority=expect_int(data.get("priority"), key="priority", context=rule_context, default=0),
            predicate=Predicate.from_mapping(when, context=rule_context),
            flags=flags,
            stages=stages,
            index=index,
        )

    @property
    def contributes_stages(self) -> bool:
        """Return ``True`` when the rule declares at least one stage template."""

        return bool(self.stages)


__all__ = ["FlagEntry", "PROFILE_BINDINGS", "RuleDefinition", "validate_namespace"]
