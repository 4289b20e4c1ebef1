# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for layered configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from wasmport.config import Config, ConfigLoader, load_config
from wasmport.errors import ConfigError


def test_defaults_without_files(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == Config()
    assert config.preload_warning_bytes is None
    assert config.use_emoji is True


def test_wasmport_toml_overrides_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "[tool.wasmport]\npreload-warning-bytes = 100\nuse-emoji = false\n",
        encoding="utf-8",
    )
    (tmp_path / "wasmport.toml").write_text("preload_warning_bytes = 200\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.preload_warning_bytes == 200
    assert config.use_emoji is False


def test_cli_overrides_win_and_none_is_ignored(tmp_path: Path) -> None:
    (tmp_path / "wasmport.toml").write_text("preload_warning_bytes = 200\nuse_color = true\n", encoding="utf-8")

    config = load_config(tmp_path, {"preload_warning_bytes": 5, "use_color": None})

    assert config.preload_warning_bytes == 5
    assert config.use_color is True


def test_relative_catalog_path_is_anchored_to_config_file(tmp_path: Path) -> None:
    (tmp_path / "wasmport.toml").write_text('catalog-path = "catalogs/local"\n', encoding="utf-8")

    config = load_config(tmp_path)

    assert config.catalog_path == tmp_path / "catalogs" / "local"


def test_environment_variables_are_expanded(tmp_path: Path) -> None:
    (tmp_path / "wasmport.toml").write_text('catalog_path = "${CATALOG_ROOT}/site.json"\n', encoding="utf-8")

    config = ConfigLoader.for_root(tmp_path, env={"CATALOG_ROOT": "/srv/wasmport"}).load()

    assert config.catalog_path == Path("/srv/wasmport/site.json")


def test_pyproject_without_section_is_ignored(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")

    assert load_config(tmp_path) == Config()


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("preload_warning_bytes = -1\n", "preload_warning_bytes"),
        ("colour = true\n", "colour"),
        ("preload_warning_bytes = [\n", "invalid TOML"),
    ],
)
def test_invalid_configuration_raises(tmp_path: Path, content: str, message: str) -> None:
    (tmp_path / "wasmport.toml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)


def test_undecodable_configuration_raises(tmp_path: Path) -> None:
    (tmp_path / "wasmport.toml").write_bytes(b'catalog_path = "caf\xe9"\n')

    with pytest.raises(ConfigError, match="invalid TOML"):
        load_config(tmp_path)
