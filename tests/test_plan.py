# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for rendered build plans and the resolver facade."""

from __future__ import annotations

import json

import pytest

from wasmport import BuildPlan, Resolver, resolve
from wasmport.catalog import BuildStage, StageKind
from wasmport.core.severity import Severity
from wasmport.engine import OVERRIDE_ORIGIN
from wasmport.linting import LinterSettings
from wasmport.plan import CommandRenderer
from wasmport.profile import SourceSignals, ToolProfile, profile_from_mapping

SAMTOOLS = {
    "name": "samtools",
    "buildSystemKind": "autoconf",
    "dependencies": ["htslib"],
    "compressionIO": ["zlib"],
}


def test_single_file_tool_needs_only_compile_and_link(packaged_catalog) -> None:
    plan = resolve(ToolProfile(build_system_kind="single-file"), catalog=packaged_catalog)

    assert [stage.name for stage in plan.stages] == ["compile", "link"]
    assert plan.merged_flags == {"memory.growth": True, "optimization.level": "-O2"}
    assert plan.diagnostics == ()
    assert plan.ready
    assert plan.stage("compile").command == "emcc -O2 -c tool.c -o tool.o"
    assert plan.stage("link").command == "emcc -sALLOW_MEMORY_GROWTH=1 -O2 tool.o -o tool.js"
    assert plan.stage("link").depends_on == ("compile",)


def test_dependency_stages_precede_the_tool(packaged_catalog) -> None:
    plan = resolve(profile_from_mapping(SAMTOOLS), catalog=packaged_catalog)

    assert [stage.name for stage in plan.stages] == ["fetch-htslib", "build-htslib", "configure", "compile", "link"]
    assert plan.stage("build-htslib").command == "emmake make -C htslib libhts.a CFLAGS='-sUSE_ZLIB=1 -O2'"
    assert plan.stage("build-htslib").dependency == "htslib"
    assert plan.stage("configure").command == (
        "emconfigure ./configure --host=wasm32-unknown-emscripten CFLAGS='-sUSE_ZLIB=1 -O2'"
    )
    assert plan.merged_flags["compression.zlib"] == "port"
    assert plan.flag_origins["compression.zlib"] == "zlib-port"
    assert plan.flag_origins["deps.htslib.target"] == "htslib"


def test_blocking_diagnostic_makes_plan_not_ready(packaged_catalog) -> None:
    plan = resolve(profile_from_mapping(SAMTOOLS), catalog=packaged_catalog)

    assert not plan.ready
    assert [diagnostic.signature for diagnostic in plan.blocking] == ["zlib-signature-mismatch"]


def test_adding_zlib_as_dependency_makes_plan_ready(packaged_catalog) -> None:
    profile = profile_from_mapping({**SAMTOOLS, "dependencies": ["htslib", "zlib"]})

    plan = resolve(profile, catalog=packaged_catalog)

    assert plan.ready
    assert plan.merged_flags["compression.zlib"] == "dynamic"
    assert plan.flag_origins["compression.zlib"] == "zlib-from-source"
    assert "-lz" in plan.stage("link").command
    assert [stage.name for stage in plan.stages][:4] == ["fetch-htslib", "fetch-zlib", "build-htslib", "build-zlib"]


def test_warnings_do_not_block(packaged_catalog) -> None:
    plan = resolve(
        ToolProfile(build_system_kind="cmake", threading_model="native-threads"),
        catalog=packaged_catalog,
    )

    assert plan.ready
    assert [diagnostic.severity for diagnostic in plan.diagnostics] == [Severity.WARNING]


def test_plan_json_is_deterministic_and_ordered(packaged_catalog) -> None:
    profile = profile_from_mapping(SAMTOOLS)

    first = resolve(profile, catalog=packaged_catalog).to_json()
    second = resolve(profile, catalog=packaged_catalog).to_json()

    assert first == second
    payload = json.loads(first)
    assert list(payload) == ["tool", "ready", "catalog", "mergedFlags", "flagOrigins", "stages", "diagnostics"]
    assert payload["catalog"] == {"version": packaged_catalog.version, "checksum": packaged_catalog.checksum}
    assert list(payload["mergedFlags"]) == sorted(payload["mergedFlags"])
    assert payload["stages"][1] == {
        "name": "build-htslib",
        "kind": "compile",
        "command": "emmake make -C htslib libhts.a CFLAGS='-sUSE_ZLIB=1 -O2'",
        "dependsOn": ["fetch-htslib"],
        "dependency": "htslib",
    }
    assert payload["diagnostics"][0]["severity"] == "blocking"
    assert payload["diagnostics"][0]["humanMessage"]


def test_list_flags_serialise_as_json_arrays(packaged_catalog) -> None:
    profile = ToolProfile(build_system_kind="single-file", async_imports=["read_region", "wait_io"])

    plan = resolve(profile, catalog=packaged_catalog)

    assert plan.merged_flags["async.imports"] == ("read_region", "wait_io")
    assert json.loads(plan.to_json())["mergedFlags"]["async.imports"] == ["read_region", "wait_io"]
    assert "-sASYNCIFY_IMPORTS='[\"read_region\",\"wait_io\"]'" in plan.stage("link").command
    assert plan.ready


def test_overrides_reach_commands_and_origins(packaged_catalog) -> None:
    plan = resolve(
        ToolProfile(build_system_kind="single-file"),
        catalog=packaged_catalog,
        overrides={"optimization.level": "-O3"},
    )

    assert plan.stage("compile").command == "emcc -O3 -c tool.c -o tool.o"
    assert plan.flag_origins["optimization.level"] == OVERRIDE_ORIGIN


def test_resolver_passes_signals_and_settings(packaged_catalog) -> None:
    resolver = Resolver.for_catalog(packaged_catalog, settings=LinterSettings(preload_threshold_bytes=10))
    profile = profile_from_mapping(
        {"buildSystemKind": "single-file", "preloadAssets": [{"path": "hg38.fa", "approximateSizeBytes": 64}]},
    )

    plan = resolver.resolve(profile, signals=SourceSignals(symbols=["fork"]))

    assert [diagnostic.signature for diagnostic in plan.diagnostics] == ["large-preload", "process-spawning"]
    assert not plan.ready
    assert "--preload-file hg38.fa" in plan.stage("link").command


def test_stage_lookup_raises_for_unknown_name(packaged_catalog) -> None:
    plan = resolve(ToolProfile(build_system_kind="single-file"), catalog=packaged_catalog)

    with pytest.raises(KeyError):
        plan.stage("configure")
    assert isinstance(plan, BuildPlan)


def test_renderer_handles_missing_flags_and_names(packaged_catalog) -> None:
    renderer = CommandRenderer(
        merged_flags={"optimization.level": "-O1", "memory.growth": False},
        flag_formats=packaged_catalog.flag_formats,
        tool="bwa",
    )
    stage = BuildStage(
        name="build-libdeflate",
        kind=StageKind.COMPILE,
        command_template="make -C {dependency}  {flag:deps.libdeflate.target} {stage} {flags:link} {tool}",
        depends_on=frozenset(),
        dependency="libdeflate",
    )

    assert renderer.render(stage) == "make -C libdeflate build-libdeflate -sALLOW_MEMORY_GROWTH=0 -O1 bwa"
    assert renderer.flags_for(StageKind.CONFIGURE) == ()


def test_plan_mappings_are_read_only(packaged_catalog) -> None:
    plan = resolve(ToolProfile(build_system_kind="single-file"), catalog=packaged_catalog)

    with pytest.raises(TypeError):
        plan.merged_flags["optimization.level"] = "-O0"  # type: ignore[index]
    with pytest.raises(TypeError):
        plan.flag_origins["optimization.level"] = "<caller>"  # type: ignore[index]
    assert plan.merged_flags["optimization.level"] == "-O2"
