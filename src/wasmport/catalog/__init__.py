# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Pattern catalog: rules, failure signatures, and their loaders."""

from __future__ import annotations

from .loader import CatalogLoader, CatalogSource, load_catalog
from .model_catalog import FlagFormat, PatternCatalog
from .model_predicate import Predicate
from .model_rule import FlagEntry, RuleDefinition
from .model_signature import ExclusionDefinition, FlagCondition, SignatureDefinition
from .model_stage import BuildStage, StageKind, StageTemplate
from .registry import DEFAULT_REGISTRY, CatalogRegistry, default_catalog
from .types import FlagValue

__all__ = [
    "BuildStage",
    "CatalogLoader",
    "CatalogRegistry",
    "CatalogSource",
    "DEFAULT_REGISTRY",
    "ExclusionDefinition",
    "FlagCondition",
    "FlagEntry",
    "FlagFormat",
    "FlagValue",
    "PatternCatalog",
    "Predicate",
    "RuleDefinition",
    "SignatureDefinition",
    "StageKind",
    "StageTemplate",
    "default_catalog",
    "load_catalog",
]
