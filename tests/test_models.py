"""Tests for data models."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from conftest import make_project, make_record
from bundle_diff.models import (
    ChangeType,
    ComparisonRecord,
    HealthStatusCatalog,
    MetadataRecord,
    Report,
    SemanticDelta,
    Snapshot,
    SourceType,
    Spec,
)


class TestSpecAndSnapshot:
    def test_spec_defaults(self):
        spec = Spec(name="rake", version="13.0.6")
        assert spec.source == ""
        assert spec.platform is None

    def test_spec_is_frozen(self):
        spec = Spec(name="rake", version="13.0.6")
        with pytest.raises(ValidationError):
            spec.version = "14.0.0"  # type: ignore[misc]

    def test_snapshot_declared(self):
        snap = Snapshot(specs={}, dependencies=frozenset({"rails"}))
        assert snap.is_declared("rails")
        assert not snap.is_declared("rack")

    def test_empty_snapshot(self):
        snap = Snapshot()
        assert snap.specs == {}
        assert snap.dependencies == frozenset()


class TestMetadataRecord:
    def test_parses_full_payload(self):
        rec = make_record("rack", statuses=["stale", "archived"])
        assert rec.score == 42.5
        assert rec.health.overall_level == "green"
        assert rec.status_keys == ["stale", "archived"]
        assert rec.rubygem.latest_release_on == date(2024, 3, 1)
        assert isinstance(rec.github_repo.repo_pushed_at, datetime)
        assert rec.github_repo.issues.open_count == 2

    def test_minimal_payload(self):
        rec = MetadataRecord.model_validate({"name": "tiny"})
        assert rec.score is None
        assert rec.health is None
        assert rec.status_keys == []

    def test_unknown_fields_ignored(self):
        rec = MetadataRecord.model_validate(
            make_project("rack", permalink="rack", description="Rack", categories=[{"name": "Web"}])
        )
        assert rec.name == "rack"
        assert not hasattr(rec, "permalink")

    def test_name_required(self):
        with pytest.raises(ValidationError):
            MetadataRecord.model_validate({"score": 10})


class TestHealthStatusCatalog:
    def test_from_records_sorted_union(self):
        catalog = HealthStatusCatalog.from_records([
            make_record("a", statuses=["stale", "no_license"]),
            make_record("b", statuses=["archived", "stale"]),
            MetadataRecord(name="c"),
        ])
        assert catalog.names == ("archived", "no_license", "stale")
        assert len(catalog) == 3

    def test_flag_vector(self):
        catalog = HealthStatusCatalog(names=("archived", "stale"))
        assert catalog.flag_vector(make_record("a", statuses=["stale"])) == [False, True]
        assert catalog.flag_vector(None) == [None, None]

    def test_flag_vector_without_health_is_unknown(self):
        catalog = HealthStatusCatalog(names=("stale",))
        record = MetadataRecord(name="x", score=1.0, health=None)
        assert catalog.flag_vector(record) == [None]

    def test_flag_vector_with_empty_statuses_is_false(self):
        catalog = HealthStatusCatalog(names=("archived", "stale"))
        assert catalog.flag_vector(make_record("b")) == [False, False]

    def test_flag_vector_shape_is_constant(self):
        catalog = HealthStatusCatalog(names=("a", "b", "c"))
        records = [None, MetadataRecord(name="x"), make_record("y", statuses=["b", "z"])]
        assert {len(catalog.flag_vector(r)) for r in records} == {3}


class TestEnums:
    def test_delta_values(self):
        assert [d.value for d in SemanticDelta] == [
            "major+", "major-", "minor+", "minor-", "patch+", "patch-", "rest",
        ]

    def test_change_and_source_values(self):
        assert {c.value for c in ChangeType} == {"added", "removed", "updated", "unchanged"}
        assert {s.value for s in SourceType} == {"gem", "github", "subfolder"}


class TestComparisonRecord:
    def test_versions(self):
        rec = ComparisonRecord(
            name="rack",
            spec_before=Spec(name="rack", version="2.2.4"),
            change_type=ChangeType.removed,
        )
        assert rec.version_before == "2.2.4"
        assert rec.version_after is None


class TestReport:
    def test_lines_and_column(self):
        report = Report(header=["Name", "ChangeType"], rows=[["a", "added"], ["b", "removed"]])
        assert report.lines() == ["Name\tChangeType", "a\tadded", "b\tremoved"]
        assert report.column("ChangeType") == ["added", "removed"]
