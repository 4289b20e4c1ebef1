# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the process-wide catalog registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from wasmport import Resolver
from wasmport.catalog import CatalogRegistry, default_catalog
from wasmport.errors import CatalogParseError
from wasmport.profile import ToolProfile


def test_registry_defaults_to_packaged_catalog() -> None:
    registry = CatalogRegistry()

    assert registry.get() is default_catalog()


def test_reload_swaps_the_active_catalog(tmp_path: Path, catalog_document, json_writer) -> None:
    registry = CatalogRegistry()
    path = json_writer(tmp_path / "catalog.json", catalog_document(version="swapped"))

    replacement = registry.reload(path)

    assert registry.get() is replacement
    assert replacement.version == "swapped"
    plan = Resolver(registry=registry).resolve(ToolProfile(build_system_kind="custom-makefile"))
    assert plan.catalog_version == "swapped"
    assert plan.stage("link").command == "emcc -O2 -o tool.js"


def test_failed_reload_keeps_previous_catalog(tmp_path: Path, make_catalog) -> None:
    original = make_catalog()
    registry = CatalogRegistry(original)
    broken = tmp_path / "broken.json"
    broken.write_text("{}", encoding="utf-8")

    with pytest.raises(CatalogParseError):
        registry.reload(broken)

    assert registry.get() is original


def test_resolution_keeps_the_catalog_it_started_with(make_catalog, catalog_document) -> None:
    registry = CatalogRegistry(make_catalog())
    resolver = Resolver(registry=registry)
    before = resolver.resolve(ToolProfile(build_system_kind="single-file"))

    registry.reload(catalog_document(version="test-2"))
    after = resolver.resolve(ToolProfile(build_system_kind="single-file"))

    assert before.catalog_version == "test-1"
    assert after.catalog_version == "test-2"
    assert before.catalog_checksum != after.catalog_checksum
