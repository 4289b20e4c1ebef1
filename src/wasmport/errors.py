# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions that abort a resolution request."""

from __future__ import annotations

from collections.abc import Iterable


class ResolverError(RuntimeError):
    """Base class for structural failures that prevent a build plan from existing."""

    @property
    def kind(self) -> str:
        """Return the error kind reported to callers and the CLI."""

        return type(self).__name__


class CatalogParseError(ResolverError):
    """Raised when a catalog document is malformed."""


class DuplicateRuleError(CatalogParseError):
    """Raised when two rules share an identical predicate and priority."""

    def __init__(self, first: str, second: str, *, priority: int) -> None:
        """Describe the ambiguous pair of rules.

        Args:
            first: Identifier of the rule declared first.
            second: Identifier of the rule that duplicates ``first``.
            priority: Priority shared by both rules.
        """

        super().__init__(
            f"rules '{first}' and '{second}' share an identical predicate at priority {priority}",
        )
        self.rules = (first, second)
        self.priority = priority


class StageCycleError(ResolverError):
    """Raised when contributed stages cannot be ordered."""

    def __init__(self, stages: Iterable[str]) -> None:
        """Record the stage names participating in the cycle.

        Args:
            stages: Stage names forming the cycle, in traversal order.
        """

        self.stages = tuple(stages)
        super().__init__(f"stage dependency cycle: {' -> '.join(self.stages)}")


class NoMatchingRuleError(ResolverError):
    """Raised when no matched rule contributes a compile or link stage."""

    def __init__(self, build_system: str) -> None:
        """Record the build system kind that produced no stages.

        Args:
            build_system: Build system kind declared by the profile.
        """

        super().__init__(f"no rule contributes a compile or link stage for build system '{build_system}'")
        self.build_system = build_system


class ConflictingCapabilityError(ResolverError):
    """Raised when a profile declares mutually exclusive capabilities."""

    def __init__(self, exclusion: str, capabilities: Iterable[str], message: str | None = None) -> None:
        """Record the violated exclusion.

        Args:
            exclusion: Identifier of the catalog exclusion entry.
            capabilities: Capabilities that may not be combined.
            message: Optional human-readable explanation from the catalog.
        """

        self.exclusion = exclusion
        self.capabilities = tuple(capabilities)
        detail = f"{', '.join(self.capabilities)} cannot be combined ({exclusion})"
        super().__init__(f"{detail}: {message}" if message else detail)


class ProfileError(ResolverError):
    """Raised when a tool profile or source-signal document is invalid."""


class ConfigError(ResolverError):
    """Raised when configuration input is invalid."""


__all__ = [
    "CatalogParseError",
    "ConfigError",
    "ConflictingCapabilityError",
    "DuplicateRuleError",
    "NoMatchingRuleError",
    "ProfileError",
    "ResolverError",
    "StageCycleError",
]
