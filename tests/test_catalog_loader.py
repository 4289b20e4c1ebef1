# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for loading and validating pattern catalogs."""

from __future__ import annotations

from pathlib import Path

import pytest

from wasmport.catalog import CatalogLoader, StageKind, load_catalog
from wasmport.errors import CatalogParseError, DuplicateRuleError


def test_load_file_materialises_rules_and_formats(tmp_path: Path, catalog_document, json_writer) -> None:
    """A single JSON document should produce a checksummed catalog."""

    path = json_writer(tmp_path / "catalog.json", catalog_document())

    catalog = load_catalog(path)

    assert catalog.version == "test-1"
    assert [rule.identifier for rule in catalog.rules] == ["defaults", "build"]
    assert catalog.source == path
    assert len(catalog.checksum) == 64
    optimization = catalog.flag_formats["optimization.level"]
    assert optimization.phases == frozenset({StageKind.COMPILE, StageKind.LINK})
    assert optimization.render("-O3") == ("-O3",)


def test_load_directory_merges_documents_in_path_order(tmp_path: Path, catalog_document, json_writer) -> None:
    root = tmp_path / "catalog"
    json_writer(root / "00-base.json", catalog_document())
    json_writer(
        root / "10-extra.json",
        {
            "schemaVersion": "1.0.0",
            "rules": [
                {
                    "id": "threads",
                    "priority": 20,
                    "when": {"all": ["threading:sandbox-threads"]},
                    "flags": [{"namespace": "thread.mode", "value": "pthreads"}],
                },
            ],
        },
    )
    json_writer(root / "_draft.json", {"not": "a catalog"})

    catalog = CatalogLoader().load(root)

    assert [rule.identifier for rule in catalog.rules] == ["defaults", "build", "threads"]
    assert catalog.source == root


def test_directory_documents_must_agree_on_version(tmp_path: Path, catalog_document, json_writer) -> None:
    root = tmp_path / "catalog"
    json_writer(root / "a.json", catalog_document())
    json_writer(root / "b.json", {"schemaVersion": "1.0.0", "version": "other"})

    with pytest.raises(CatalogParseError, match="conflicts"):
        load_catalog(root)


def test_empty_directory_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "empty").mkdir()

    with pytest.raises(CatalogParseError, match="no catalog documents"):
        load_catalog(tmp_path / "empty")


def test_missing_file_is_a_parse_error(tmp_path: Path) -> None:
    with pytest.raises(CatalogParseError, match="file not found"):
        load_catalog(tmp_path / "absent.json")


def test_invalid_json_is_a_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(CatalogParseError, match="failed to parse"):
        load_catalog(path)


def test_invalid_utf8_is_a_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"schemaVersion": "1.0.0", "version": "2025\xff"}')

    with pytest.raises(CatalogParseError, match="failed to parse"):
        load_catalog(path)


def test_schema_violation_reports_location(catalog_document) -> None:
    document = catalog_document()
    document["rules"][0]["priority"] = "high"

    with pytest.raises(CatalogParseError, match="rules/0/priority"):
        load_catalog(document)


def test_unknown_stage_placeholder_is_rejected(make_catalog) -> None:
    with pytest.raises(CatalogParseError, match="unknown placeholder"):
        make_catalog(
            rules=[
                {
                    "id": "odd",
                    "stages": [{"name": "odd", "kind": "compile", "command": "make {target}"}],
                },
            ],
        )


def test_dependency_placeholder_requires_for_each(make_catalog) -> None:
    with pytest.raises(CatalogParseError, match="forEach"):
        make_catalog(
            rules=[
                {
                    "id": "deps",
                    "stages": [{"name": "fetch", "kind": "fetch-dependency", "command": "get {dependency}"}],
                },
            ],
        )


def test_unknown_profile_binding_is_rejected(make_catalog) -> None:
    with pytest.raises(CatalogParseError, match="unknown profile binding"):
        make_catalog(rules=[{"id": "bind", "flags": [{"namespace": "x", "value": "${nope}"}]}])


def test_duplicate_rule_identifier_is_rejected(make_catalog) -> None:
    with pytest.raises(CatalogParseError, match="duplicate rule identifier 'defaults'"):
        make_catalog(rules=[{"id": "defaults", "priority": 3}])


def test_identical_predicate_and_priority_is_a_duplicate_rule(make_catalog) -> None:
    """Two rules equal in predicate (in any order) and priority are ambiguous."""

    with pytest.raises(DuplicateRuleError) as excinfo:
        make_catalog(
            rules=[
                {"id": "first", "priority": 7, "when": {"all": ["isa:simd", "compression:zlib"]}},
                {"id": "second", "priority": 7, "when": {"all": ["compression:zlib", "isa:simd"]}},
            ],
        )

    assert excinfo.value.rules == ("first", "second")
    assert excinfo.value.kind == "DuplicateRuleError"


def test_same_predicate_at_different_priorities_is_allowed(make_catalog) -> None:
    catalog = make_catalog(
        rules=[
            {"id": "low", "priority": 1, "when": {"all": ["isa:simd"]}},
            {"id": "high", "priority": 2, "when": {"all": ["isa:simd"]}},
        ],
    )

    assert catalog.rule("high").priority == 2


def test_fetch_stage_may_not_depend_on_build_stage(make_catalog) -> None:
    with pytest.raises(CatalogParseError, match="may not depend on build stages: compile"):
        make_catalog(
            rules=[
                {
                    "id": "fetcher",
                    "priority": 1,
                    "stages": [
                        {
                            "name": "fetch-{dependency}",
                            "kind": "fetch-dependency",
                            "command": "get {dependency}",
                            "dependsOn": ["compile"],
                            "forEach": "dependency",
                        },
                    ],
                },
            ],
        )


def test_exclusion_needs_two_distinct_capabilities(make_catalog) -> None:
    with pytest.raises(CatalogParseError, match="at least two distinct"):
        make_catalog(exclusions=[{"id": "same", "capabilities": ["isa:simd", "isa:simd"]}])


def test_signature_without_trigger_or_condition_is_rejected(make_catalog) -> None:
    with pytest.raises(CatalogParseError, match="'triggers' or a 'condition'"):
        make_catalog(signatures=[{"id": "never", "severity": "warning", "message": "never fires"}])


def test_flag_format_values_table(make_catalog) -> None:
    catalog = make_catalog(
        flagFormats={
            "thread.mode": {"values": {"pthreads": "-pthread", "disabled": ""}, "phases": ["link"]},
            "assets.preload": {"format": "--preload-file {value}", "phases": ["link"], "each": True},
        },
    )

    thread_mode = catalog.flag_formats["thread.mode"]
    assert thread_mode.render("pthreads") == ("-pthread",)
    assert thread_mode.render("disabled") == ()
    assert thread_mode.render("other") == ()
    preload = catalog.flag_formats["assets.preload"]
    assert preload.render(("a.fa", "b.fa")) == ("--preload-file a.fa", "--preload-file b.fa")


def test_known_capabilities_cover_every_reference(make_catalog) -> None:
    catalog = make_catalog(
        capabilities=["threading:none"],
        rules=[{"id": "cm", "when": {"buildSystem": ["cmake"], "none": ["isa:simd"]}}],
        signatures=[
            {"id": "s", "triggers": ["symbol:fork"], "severity": "blocking", "message": "spawns"},
        ],
        exclusions=[{"id": "x", "capabilities": ["dependency:tbb", "threading:sandbox-threads"]}],
    )

    assert catalog.known_capabilities == frozenset(
        {
            "threading:none",
            "build:cmake",
            "isa:simd",
            "symbol:fork",
            "dependency:tbb",
            "threading:sandbox-threads",
        },
    )


def test_packaged_catalog_loads(packaged_catalog) -> None:
    assert packaged_catalog.version
    assert packaged_catalog.rule("single-file").contributes_stages
    assert {signature.identifier for signature in packaged_catalog.signatures} >= {
        "zlib-signature-mismatch",
        "x86-assembly",
        "native-threads",
        "async-imports-without-transform",
        "large-preload",
    }


def test_unsupported_schema_version_is_rejected(catalog_document) -> None:
    document = catalog_document()
    document["schemaVersion"] = "2.0.0"

    with pytest.raises(CatalogParseError, match="schemaVersion"):
        load_catalog(document)
