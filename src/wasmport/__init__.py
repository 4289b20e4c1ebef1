# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build-configuration resolver for porting native tools to WebAssembly."""

from __future__ import annotations

from importlib import metadata

from .errors import ResolverError
from .plan.models import BuildPlan
from .profile.models import SourceSignals, ToolProfile
from .resolver import Resolver, resolve

__all__ = ["BuildPlan", "Resolver", "ResolverError", "SourceSignals", "ToolProfile", "__version__", "resolve"]

try:
    __version__ = metadata.version("wasmport")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
