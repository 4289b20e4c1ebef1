# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rule matching, flag merging, and stage ordering."""

from __future__ import annotations

from .flags import FlagAccumulator, FlagProvenance, OVERRIDE_ORIGIN, parse_override, parse_overrides
from .rule_engine import EngineResult, RuleEngine
from .stages import StageGraph

__all__ = [
    "EngineResult",
    "FlagAccumulator",
    "FlagProvenance",
    "OVERRIDE_ORIGIN",
    "RuleEngine",
    "StageGraph",
    "parse_override",
    "parse_overrides",
]
