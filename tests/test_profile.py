# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for tool profile parsing and capability derivation."""

from __future__ import annotations

from pathlib import Path

import pytest

from wasmport.errors import ProfileError
from wasmport.profile import (
    BuildSystemKind,
    SourceSignals,
    ThreadingModel,
    ToolProfile,
    load_profile,
    load_signals,
    profile_from_mapping,
)
from wasmport.profile.capabilities import split_capability


def test_capabilities_follow_a_stable_order() -> None:
    profile = profile_from_mapping(
        {
            "buildSystemKind": "cmake",
            "dependencies": ["zlib", {"name": "khash", "headerOnly": True}],
            "threadingModel": "sandbox-threads",
            "instructionSetUsage": ["x86-specific-assembly", "simd"],
            "compressionIO": ["lzma", "bzip2"],
            "asyncImports": ["read_block"],
            "preloadAssets": [{"path": "db.bin", "approximateSizeBytes": 10}],
            "memoryHint": 268435456,
        },
    )

    assert profile.capabilities() == (
        "build:cmake",
        "dependency:khash",
        "header-only:khash",
        "dependency:zlib",
        "threading:sandbox-threads",
        "isa:simd",
        "isa:x86-specific-assembly",
        "compression:bzip2",
        "compression:lzma",
        "async:imports",
        "assets:preload",
        "memory:fixed",
    )


def test_minimal_profile_defaults() -> None:
    profile = ToolProfile(build_system_kind="single-file")

    assert profile.name == "tool"
    assert profile.build_system_kind is BuildSystemKind.SINGLE_FILE
    assert profile.threading_model is ThreadingModel.NONE
    assert profile.capabilities() == ("build:single-file", "threading:none", "memory:growth")
    assert profile.preload_total_bytes == 0


def test_dependencies_accept_a_mapping_form() -> None:
    profile = profile_from_mapping(
        {"buildSystemKind": "autoconf", "dependencies": {"htslib": {}, "khash": {"headerOnly": True}}},
    )

    assert [dependency.name for dependency in profile.dependencies] == ["htslib", "khash"]
    assert [dependency.name for dependency in profile.compiled_dependencies] == ["htslib"]


def test_duplicate_dependencies_are_rejected() -> None:
    with pytest.raises(ProfileError, match="declared more than once"):
        profile_from_mapping({"buildSystemKind": "autoconf", "dependencies": ["zlib", "zlib"]})


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"buildSystemKind": "meson"},
        {"buildSystemKind": "cmake", "memoryHint": 0},
        {"buildSystemKind": "cmake", "threadingModel": "green-threads"},
        {"buildSystemKind": "cmake", "unexpected": True},
        {"buildSystemKind": "autoconf", "dependencies": {"htslib": True}},
        {"buildSystemKind": "autoconf", "dependencies": {"htslib": "bundled"}},
    ],
)
def test_invalid_profiles_raise_profile_error(payload) -> None:
    with pytest.raises(ProfileError) as excinfo:
        profile_from_mapping(payload)

    assert excinfo.value.kind == "ProfileError"


def test_profile_loads_from_toml(tmp_path: Path) -> None:
    path = tmp_path / "bwa.toml"
    path.write_text(
        'name = "bwa"\n'
        'buildSystemKind = "custom-makefile"\n'
        'instructionSetUsage = ["simd"]\n'
        "\n"
        "[[preloadAssets]]\n"
        'path = "ref.fa"\n'
        "approximateSizeBytes = 2048\n",
        encoding="utf-8",
    )

    profile = load_profile(path)

    assert profile.name == "bwa"
    assert profile.build_system_kind is BuildSystemKind.CUSTOM_MAKEFILE
    assert profile.preload_total_bytes == 2048


def test_profile_loads_from_json(profile_file) -> None:
    path = profile_file({"name": "minimap2", "buildSystemKind": "custom-makefile", "compressionIO": ["zlib"]})

    assert load_profile(path).capabilities()[-2] == "compression:zlib"


def test_missing_and_malformed_profile_files(tmp_path: Path) -> None:
    with pytest.raises(ProfileError, match="file not found"):
        load_profile(tmp_path / "nope.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ProfileError, match="top-level object"):
        load_profile(broken)

    undecodable = tmp_path / "undecodable.json"
    undecodable.write_bytes(b'{"name": "bwa\xff", "buildSystemKind": "cmake"}')
    with pytest.raises(ProfileError, match="undecodable.json"):
        load_profile(undecodable)


def test_undecodable_toml_profile_is_a_profile_error(tmp_path: Path) -> None:
    path = tmp_path / "bwa.toml"
    path.write_bytes(b'name = "bwa\xff"\nbuildSystemKind = "cmake"\n')

    with pytest.raises(ProfileError, match="bwa.toml"):
        load_profile(path)


def test_signals_deduplicate_and_map_to_capabilities(profile_file) -> None:
    path = profile_file({"symbols": ["fork", "fork", "mmap"], "ifdefs": ["__SSE2__", ""]}, name="signals.json")

    signals = load_signals(path)

    assert signals == SourceSignals(symbols=("fork", "mmap"), ifdefs=("__SSE2__",))
    assert signals.capabilities() == ("symbol:fork", "symbol:mmap", "ifdef:__SSE2__")


def test_async_imports_keep_first_occurrence_order() -> None:
    profile = ToolProfile(build_system_kind="cmake", async_imports=["b", "a", "b"])

    assert profile.async_imports == ("b", "a")


@pytest.mark.parametrize(("key", "expected"), [("isa:simd", ("isa", "simd")), ("ifdef:A:B", ("ifdef", "A:B"))])
def test_split_capability(key, expected) -> None:
    assert split_capability(key) == expected


@pytest.mark.parametrize("key", ["isa", "isa:", "colour:blue"])
def test_split_capability_rejects_malformed_keys(key) -> None:
    with pytest.raises(ValueError):
        split_capability(key)
