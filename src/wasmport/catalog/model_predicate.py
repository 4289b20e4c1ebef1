# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Declarative rule predicates evaluated against profile capabilities."""

from __future__ import annotations

from collections.abc import Mapping, Set
from dataclasses import dataclass

from ..errors import CatalogParseError
from ..profile import capabilities as caps
from ..profile.models import BuildSystemKind
from .types import JSONValue
from .utils import capability_array, string_array

PredicateKey = tuple[frozenset[str], frozenset[str], frozenset[str], frozenset[str]]


@dataclass(frozen=True, slots=True)
class Predicate:
    """Conjunction of capability tests; an empty predicate always holds.

    ``build_systems`` and ``any_of`` hold when at least one entry is present,
    ``all_of`` when every entry is present, ``none_of`` when no entry is.
    """

    build_systems: tuple[str, ...] = ()
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()
    none_of: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, JSONValue], *, context: str) -> Predicate:
        """Build a predicate from a catalog ``when`` object.

        Args:
            data: Raw ``when`` mapping.
            context: Human-friendly prefix used in error messages.

        Returns:
            Predicate: Parsed predicate.

        Raises:
            CatalogParseError: If a build system or capability is malformed.
        """

        build_systems = string_array(data.get("buildSystem"), key="buildSystem", context=context)
        known = {kind.value for kind in BuildSystemKind}
        for kind in build_systems:
            if kind not in known:
                raise CatalogParseError(f"{context}: unknown build system '{kind}'")
        return cls(
            build_systems=build_systems,
            all_of=capability_array(data.get("all"), key="all", context=context),
            any_of=capability_array(data.get("any"), key="any", context=context),
            none_of=capability_array(data.get("none"), key="none", context=context),
        )

    def matches(self, capabilities: Set[str]) -> bool:
        """Return ``True`` when the predicate holds for ``capabilities``."""

        if self.build_systems and not any(
            caps.capability(caps.BUILD, kind) in capabilities for kind in self.build_systems
        ):
            return False
        if any(key not in capabilities for key in self.all_of):
            return False
        if self.any_of and not any(key in capabilities for key in self.any_of):
            return False
        return not any(key in capabilities for key in self.none_of)

    @property
    def canonical_key(self) -> PredicateKey:
        """Return an order-insensitive key identifying equivalent predicates."""

        return (
            frozenset(self.build_systems),
            frozenset(self.all_of),
            frozenset(self.any_of),
            frozenset(self.none_of),
        )

    @property
    def referenced_capabilities(self) -> frozenset[str]:
        """Return every capability key the predicate mentions."""

        build_keys = {caps.capability(caps.BUILD, kind) for kind in self.build_systems}
        return frozenset(build_keys.union(self.all_of, self.any_of, self.none_of))

    def describe(self) -> str:
        """Return a compact human-readable rendering of the predicate."""

        parts: list[str] = []
        if self.build_systems:
            parts.append(f"build in ({', '.join(self.build_systems)})")
        if self.all_of:
            parts.append(f"all({', '.join(self.all_of)})")
        if self.any_of:
            parts.append(f"any({', '.join(self.any_of)})")
        if self.none_of:
            parts.append(f"none({', '.join(self.none_of)})")
        return " and ".join(parts) or "always"


__all__ = ["Predicate", "PredicateKey"]
