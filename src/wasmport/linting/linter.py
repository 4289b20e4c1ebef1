# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compatibility linter matching profiles against known failure signatures."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Final

from ..catalog.model_catalog import PatternCatalog
from ..catalog.model_signature import PRELOAD_TOTAL_BYTES_ABOVE, SignatureCondition, SignatureDefinition
from ..catalog.types import FlagValue
from ..core.severity import Severity
from ..profile import capabilities as caps
from ..profile.models import SourceSignals, ToolProfile
from .diagnostics import Diagnostic

LOGGER = logging.getLogger(__name__)

UNKNOWN_CAPABILITY_MESSAGE: Final[str] = "no known signature; proceed with caution"
VALUE_PLACEHOLDER: Final[str] = "{value}"


@dataclass(frozen=True, slots=True)
class LinterSettings:
    """Tunable thresholds applied while linting.

    Attributes:
        preload_threshold_bytes: Replaces the ``thresholdBytes`` of
            preload-size signatures when set.
    """

    preload_threshold_bytes: int | None = None


@dataclass(slots=True)
class CompatibilityLinter:
    """Emit diagnostics for a profile given the flags already merged for it."""

    catalog: PatternCatalog
    settings: LinterSettings = field(default_factory=LinterSettings)

    def lint(
        self,
        profile: ToolProfile,
        merged_flags: Mapping[str, FlagValue],
        signals: SourceSignals | None = None,
    ) -> tuple[Diagnostic, ...]:
        """Return diagnostics for ``profile``.

        Signature diagnostics come first, ordered by signature declaration and
        then by capability; diagnostics for capabilities the catalog never
        mentions follow in capability order.

        Args:
            profile: Tool profile under resolution.
            merged_flags: Flags produced by the rule engine.
            signals: Optional source-level observations.

        Returns:
            tuple[Diagnostic, ...]: Diagnostics in deterministic order.
        """

        capabilities = _ordered_capabilities(profile, signals)
        present = frozenset(capabilities)
        diagnostics: list[Diagnostic] = []
        for signature in self.catalog.signatures_for(present):
            if signature.condition is not None:
                triggered = [key for key in capabilities if key in signature.triggers]
                if signature.triggers and not triggered:
                    continue
                detail = self._condition_detail(signature.condition, profile)
                if detail is None:
                    continue
                capability = triggered[0] if triggered else _condition_capability(signature.condition)
                diagnostic = self._diagnose(signature, capability, merged_flags, detail=detail)
                if diagnostic is not None:
                    diagnostics.append(diagnostic)
                continue
            for key in capabilities:
                if key not in signature.triggers:
                    continue
                diagnostic = self._diagnose(signature, key, merged_flags)
                if diagnostic is not None:
                    diagnostics.append(diagnostic)

        known = self.catalog.known_capabilities
        for key in capabilities:
            if key in known:
                continue
            diagnostics.append(
                Diagnostic(
                    severity=Severity.INFO,
                    signature=None,
                    message=f"{key}: {UNKNOWN_CAPABILITY_MESSAGE}",
                    capability=key,
                ),
            )
        return tuple(diagnostics)

    def _diagnose(
        self,
        signature: SignatureDefinition,
        capability: str | None,
        merged_flags: Mapping[str, FlagValue],
        *,
        detail: str | None = None,
    ) -> Diagnostic | None:
        """Build the diagnostic for one signature match, honouring mitigations."""

        value = caps.split_capability(capability)[1] if capability is not None else ""
        message = signature.message.replace(VALUE_PLACEHOLDER, value)
        if detail:
            message = f"{message} ({detail})"
        suggested_fix = signature.suggested_fix.replace(VALUE_PLACEHOLDER, value)
        condition = signature.mitigation(merged_flags)
        if condition is None:
            return Diagnostic(
                severity=signature.severity,
                signature=signature.identifier,
                message=message,
                suggested_fix=suggested_fix,
                capability=capability,
            )
        if signature.mitigated_severity is None:
            LOGGER.debug("signature %s mitigated by %s; dropped", signature.identifier, condition.describe())
            return None
        return Diagnostic(
            severity=signature.mitigated_severity,
            signature=signature.identifier,
            message=f"{message}; mitigation applied: {condition.describe()}",
            suggested_fix=suggested_fix,
            capability=capability,
            mitigated=True,
            mitigation=condition.describe(),
        )

    def _condition_detail(self, condition: SignatureCondition, profile: ToolProfile) -> str | None:
        """Return a description of why ``condition`` holds, or ``None`` when it does not."""

        if condition.kind == PRELOAD_TOTAL_BYTES_ABOVE:
            threshold = self.settings.preload_threshold_bytes
            if threshold is None:
                threshold = condition.threshold_bytes
            total = profile.preload_total_bytes
            if total > threshold:
                return f"{total} bytes preloaded, threshold {threshold} bytes"
            return None
        raise ValueError(f"unsupported signature condition '{condition.kind}'")


def _condition_capability(condition: SignatureCondition) -> str | None:
    if condition.kind == PRELOAD_TOTAL_BYTES_ABOVE:
        return caps.ASSETS_PRELOAD
    return None


def _ordered_capabilities(profile: ToolProfile, signals: SourceSignals | None) -> tuple[str, ...]:
    """Return profile capabilities followed by signal capabilities, without repeats."""

    keys: Iterable[str] = profile.capabilities()
    if signals is not None:
        keys = (*keys, *signals.capabilities())
    return tuple(dict.fromkeys(keys))


__all__ = ["CompatibilityLinter", "LinterSettings", "UNKNOWN_CAPABILITY_MESSAGE"]
