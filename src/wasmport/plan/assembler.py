# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Assembly of engine output and diagnostics into a build plan."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..catalog.model_catalog import PatternCatalog
from ..engine.rule_engine import EngineResult
from ..linting.diagnostics import Diagnostic, has_blocking
from ..profile.models import ToolProfile
from .models import BuildPlan, ResolvedStage
from .templates import CommandRenderer

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildPlanAssembler:
    """Combine resolved stages, merged flags, and diagnostics into a :class:`BuildPlan`."""

    catalog: PatternCatalog

    def assemble(
        self,
        profile: ToolProfile,
        result: EngineResult,
        diagnostics: Sequence[Diagnostic],
    ) -> BuildPlan:
        """Return the plan for ``profile``.

        Stage order and merged flags are taken verbatim from ``result``; the
        plan is ready exactly when no diagnostic is blocking.

        Args:
            profile: Tool profile under resolution.
            result: Output of the rule engine.
            diagnostics: Output of the compatibility linter.

        Returns:
            BuildPlan: Immutable plan with rendered commands.
        """

        renderer = CommandRenderer(
            merged_flags=result.merged_flags,
            flag_formats=self.catalog.flag_formats,
            tool=profile.name,
        )
        stages = tuple(
            ResolvedStage(
                name=stage.name,
                kind=stage.kind,
                command=renderer.render(stage),
                depends_on=tuple(sorted(stage.depends_on)),
                dependency=stage.dependency,
                rule=result.stage_origins.get(stage.name),
            )
            for stage in result.stages
        )
        ready = not has_blocking(diagnostics)
        LOGGER.debug("plan for %s: %d stages, ready=%s", profile.name, len(stages), ready)
        return BuildPlan(
            tool=profile.name,
            stages=stages,
            merged_flags=dict(result.merged_flags),
            diagnostics=tuple(diagnostics),
            ready=ready,
            catalog_version=self.catalog.version,
            catalog_checksum=self.catalog.checksum,
            flag_origins={namespace: origin.rule for namespace, origin in result.provenance.items()},
        )


__all__ = ["BuildPlanAssembler"]
