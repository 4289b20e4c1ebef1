# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compatibility linting against known failure signatures."""

from __future__ import annotations

from .diagnostics import Diagnostic, has_blocking, highest_severity
from .linter import UNKNOWN_CAPABILITY_MESSAGE, CompatibilityLinter, LinterSettings

__all__ = [
    "CompatibilityLinter",
    "Diagnostic",
    "LinterSettings",
    "UNKNOWN_CAPABILITY_MESSAGE",
    "has_blocking",
    "highest_severity",
]
