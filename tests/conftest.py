# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from wasmport.catalog import PatternCatalog, default_catalog, load_catalog


def write_json(path: Path, payload: object) -> Path:
    """Serialize ``payload`` as formatted JSON into ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def base_document(**sections: Any) -> dict[str, Any]:
    """Return a minimal catalog document with one compile/link rule for every build system."""

    document: dict[str, Any] = {
        "schemaVersion": "1.0.0",
        "version": "test-1",
        "flagFormats": {
            "optimization.level": {"format": "{value}", "phases": ["compile", "link"]},
        },
        "rules": [
            {
                "id": "defaults",
                "flags": [{"namespace": "optimization.level", "value": "-O2"}],
            },
            {
                "id": "build",
                "priority": 10,
                "stages": [
                    {"name": "compile", "kind": "compile", "command": "emcc {flags} -c {tool}.c"},
                    {"name": "link", "kind": "link", "command": "emcc {flags} -o {tool}.js"},
                ],
            },
        ],
    }
    for key, value in sections.items():
        if key == "rules":
            document["rules"] = [*document["rules"], *value]
        else:
            document[key] = value
    return document


@pytest.fixture
def make_catalog() -> Callable[..., PatternCatalog]:
    """Return a factory building catalogs from :func:`base_document` sections."""

    def factory(**sections: Any) -> PatternCatalog:
        return load_catalog(base_document(**sections))

    return factory


@pytest.fixture
def packaged_catalog() -> PatternCatalog:
    """Return the catalog shipped with the package."""

    return default_catalog()


@pytest.fixture
def profile_file(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Return a helper writing a profile document to a temporary JSON file."""

    def factory(payload: dict[str, Any], name: str = "profile.json") -> Path:
        return write_json(tmp_path / name, payload)

    return factory


@pytest.fixture
def catalog_document() -> Callable[..., dict[str, Any]]:
    """Return :func:`base_document` for tests that edit raw catalog documents."""

    return base_document


@pytest.fixture
def json_writer() -> Callable[[Path, object], Path]:
    """Return :func:`write_json` for tests writing documents to disk."""

    return write_json
