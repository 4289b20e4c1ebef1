# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rule engine folding matched catalog rules into flags and ordered stages."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from ..catalog.model_catalog import PatternCatalog
from ..catalog.model_stage import BuildStage
from ..catalog.types import FlagValue
from ..errors import ConflictingCapabilityError, NoMatchingRuleError
from ..profile.models import ToolProfile
from .flags import FlagAccumulator, FlagProvenance, normalise_overrides
from .stages import StageGraph

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EngineResult:
    """Flags and stages resolved for one profile."""

    merged_flags: Mapping[str, FlagValue]
    stages: tuple[BuildStage, ...]
    provenance: Mapping[str, FlagProvenance] = field(default_factory=dict)
    matched_rules: tuple[str, ...] = ()
    stage_origins: Mapping[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class RuleEngine:
    """Match catalog rules against a profile and merge their contributions.

    Rules are folded in precedence order (descending priority, then
    declaration order). For every flag namespace independently, a rule's
    value replaces the current holder when the rule's priority is greater
    than or equal to the holder's. Rules only ever see the profile, never
    each other's output.
    """

    catalog: PatternCatalog

    def resolve(
        self,
        profile: ToolProfile,
        *,
        overrides: Mapping[str, FlagValue] | None = None,
    ) -> EngineResult:
        """Resolve flags and stages for ``profile``.

        Args:
            profile: Tool profile under resolution.
            overrides: Caller-supplied flag values applied after every rule.

        Returns:
            EngineResult: Merged flags, ordered stages, and provenance.

        Raises:
            ConflictingCapabilityError: If the profile violates a catalog exclusion.
            NoMatchingRuleError: If no matched rule contributes a compile or link stage.
            StageCycleError: If the contributed stages form a cycle.
        """

        capabilities = frozenset(profile.capabilities())
        for exclusion in self.catalog.exclusions_violated(capabilities):
            raise ConflictingCapabilityError(exclusion.identifier, exclusion.capabilities, exclusion.message)

        matched = self.catalog.rules_matching(profile)
        flags = FlagAccumulator()
        graph = StageGraph()
        for rule in matched:
            for entry in rule.flags:
                value = entry.resolve(profile)
                if value is None:
                    LOGGER.debug("rule %s: %s unbound for this profile", rule.identifier, entry.namespace)
                    continue
                flags.offer(entry.namespace, value, rule=rule.identifier, priority=rule.priority)
            for position, template in enumerate(rule.stages):
                for expansion, stage in enumerate(template.expand(profile)):
                    graph.add(
                        stage,
                        rule=rule.identifier,
                        priority=rule.priority,
                        order=(rule.index, position, expansion),
                    )
        for namespace, value in normalise_overrides(overrides).items():
            flags.override(namespace, value)

        if not graph.has_build_stage():
            raise NoMatchingRuleError(profile.build_system_kind.value)
        stages = graph.ordered()
        return EngineResult(
            merged_flags=flags.merged(),
            stages=stages,
            provenance=flags.provenance(),
            matched_rules=tuple(rule.identifier for rule in matched),
            stage_origins={stage.name: graph.origin(stage.name) for stage in stages},
        )


__all__ = ["EngineResult", "RuleEngine"]
