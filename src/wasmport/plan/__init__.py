# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Build plan models and assembly."""

from __future__ import annotations

from .assembler import BuildPlanAssembler
from .models import BuildPlan, ResolvedStage
from .templates import CommandRenderer

__all__ = ["BuildPlan", "BuildPlanAssembler", "CommandRenderer", "ResolvedStage"]
