# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tool profile models and loaders."""

from __future__ import annotations

from .loader import load_profile, load_signals, profile_from_mapping, signals_from_mapping
from .models import (
    BuildSystemKind,
    CompressionLibrary,
    Dependency,
    InstructionSetUsage,
    PreloadAsset,
    SourceSignals,
    ThreadingModel,
    ToolProfile,
)

__all__ = [
    "BuildSystemKind",
    "CompressionLibrary",
    "Dependency",
    "InstructionSetUsage",
    "PreloadAsset",
    "SourceSignals",
    "ThreadingModel",
    "ToolProfile",
    "load_profile",
    "load_signals",
    "profile_from_mapping",
    "signals_from_mapping",
]
