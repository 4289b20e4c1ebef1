# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Resolver facade running the engine, linter, and assembler in sequence."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from .catalog.model_catalog import PatternCatalog
from .catalog.registry import DEFAULT_REGISTRY, CatalogRegistry
from .catalog.types import FlagValue
from .engine.rule_engine import RuleEngine
from .linting.linter import CompatibilityLinter, LinterSettings
from .plan.assembler import BuildPlanAssembler
from .plan.models import BuildPlan
from .profile.models import SourceSignals, ToolProfile

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class Resolver:
    """Turn tool profiles into build plans against the active catalog.

    A resolver reads the catalog from its registry once per call, so a
    concurrent :meth:`CatalogRegistry.reload` never affects a resolution
    already in progress.
    """

    registry: CatalogRegistry = field(default_factory=lambda: DEFAULT_REGISTRY)
    settings: LinterSettings = field(default_factory=LinterSettings)

    @classmethod
    def for_catalog(cls, catalog: PatternCatalog, *, settings: LinterSettings | None = None) -> Resolver:
        """Return a resolver bound to a fixed ``catalog``."""

        return cls(registry=CatalogRegistry(catalog), settings=settings or LinterSettings())

    def resolve(
        self,
        profile: ToolProfile,
        *,
        signals: SourceSignals | None = None,
        overrides: Mapping[str, FlagValue] | None = None,
    ) -> BuildPlan:
        """Resolve ``profile`` into a :class:`BuildPlan`.

        Args:
            profile: Tool profile under resolution.
            signals: Optional source-level observations used by the linter.
            overrides: Caller-supplied flag values applied after every rule.

        Returns:
            BuildPlan: Deterministic plan for ``profile``.

        Raises:
            ResolverError: If the catalog or profile prevents a plan from existing.
        """

        catalog = self.registry.get()
        LOGGER.debug("resolving %s against catalog %s (%s)", profile.name, catalog.version, catalog.checksum)
        result = RuleEngine(catalog).resolve(profile, overrides=overrides)
        diagnostics = CompatibilityLinter(catalog, self.settings).lint(profile, result.merged_flags, signals)
        return BuildPlanAssembler(catalog).assemble(profile, result, diagnostics)


def resolve(
    profile: ToolProfile,
    *,
    catalog: PatternCatalog | None = None,
    signals: SourceSignals | None = None,
    overrides: Mapping[str, FlagValue] | None = None,
    settings: LinterSettings | None = None,
) -> BuildPlan:
    """Resolve ``profile`` with ``catalog`` or the process-wide catalog."""

    if catalog is None:
        resolver = Resolver(settings=settings or LinterSettings())
    else:
        resolver = Resolver.for_catalog(catalog, settings=settings)
    return resolver.resolve(profile, signals=signals, overrides=overrides)


__all__ = ["Resolver", "resolve"]
