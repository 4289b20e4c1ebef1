# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic records reported by the compatibility linter."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from ..core.severity import Severity, severity_rank


class Diagnostic(BaseModel):
    """Known-issue report with severity and suggested mitigation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    severity: Severity
    signature: str | None = None
    message: str = Field(alias="humanMessage")
    suggested_fix: str = Field(default="", alias="suggestedFix")
    capability: str | None = None
    mitigated: bool = False
    mitigation: str | None = None

    @property
    def is_blocking(self) -> bool:
        """Return ``True`` when the diagnostic prevents the plan from running."""

        return self.severity is Severity.BLOCKING

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-ready mapping using the published field names."""

        return self.model_dump(mode="json", by_alias=True)


def has_blocking(diagnostics: Iterable[Diagnostic]) -> bool:
    """Return ``True`` when any diagnostic is blocking."""

    return any(diagnostic.is_blocking for diagnostic in diagnostics)


def highest_severity(diagnostics: Iterable[Diagnostic]) -> Severity | None:
    """Return the most severe level present, or ``None`` for an empty collection."""

    levels = [diagnostic.severity for diagnostic in diagnostics]
    if not levels:
        return None
    return max(levels, key=severity_rank)


__all__ = ["Diagnostic", "has_blocking", "highest_severity"]
