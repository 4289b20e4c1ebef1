# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels attached to compatibility diagnostics."""

    INFO = "info"
    WARNING = "warning"
    BLOCKING = "blocking"


_SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.BLOCKING: 2,
}

_SEVERITY_STYLE: Final[dict[Severity, str]] = {
    Severity.INFO: "cyan",
    Severity.WARNING: "yellow",
    Severity.BLOCKING: "red",
}


def severity_rank(severity: Severity) -> int:
    """Return the ordinal rank of ``severity`` (higher is more severe)."""

    return _SEVERITY_RANK[severity]


def severity_style(severity: Severity) -> str:
    """Map :class:`Severity` to a Rich style name."""

    return _SEVERITY_STYLE.get(severity, "white")


def parse_severity(value: str) -> Severity:
    """Return the :class:`Severity` named by ``value``.

    Raises:
        ValueError: If ``value`` does not name a known severity.
    """

    return Severity(value.strip().lower())


__all__ = ["Severity", "parse_severity", "severity_rank", "severity_style"]
