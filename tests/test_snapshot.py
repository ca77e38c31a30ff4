"""Tests for snapshot loading and result serialization."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from team_xray import SnapshotFormatError, assemble
from team_xray.enrichment import CommitPatternNarrator, enrich_analysis
from team_xray.models import CommitRecord
from team_xray.snapshot import (
    activity_fingerprint,
    activity_from_dict,
    analysis_to_dict,
    enriched_to_dict,
    load_activity,
    parse_timestamp,
)

ALICE = "alice@example.com"
BOB = "bob@example.com"


def _document() -> dict:
    return {
        "repository": "acme/widgets",
        "commits": [
            {
                "sha": "c1",
                "author": "Alice",
                "email": "Alice@Example.com",
                "message": "Refactor authentication system with improved security",
                "date": "2025-11-18T10:00:00Z",
                "files": ["src/auth/login.ts", "src/auth/security.ts"],
            },
            {
                "sha": "c2",
                "author": "Bob",
                "email": BOB,
                "message": "Add React dashboard components",
                "date": "2025-11-19T10:00:00Z",
                "files": ["src/components/Dashboard.tsx"],
            },
            {
                "sha": "c3",
                "author": "Alice",
                "email": ALICE,
                "message": "Reviewed Bob's PR and merged",
                "date": "2025-11-20T10:00:00Z",
                "files": [],
            },
        ],
    }


# ── Loading ─────────────────────────────────────────────────────────────────


def test_derived_sections() -> None:
    activity = activity_from_dict(_document())

    assert set(activity.contributors) == {ALICE, BOB}
    assert activity.contributors[ALICE].display_name == "Alice"
    assert activity.contributors[ALICE].commit_count == 2
    assert activity.contributors[ALICE].last_commit_timestamp == datetime(
        2025, 11, 20, 10, 0, tzinfo=timezone.utc
    )
    assert activity.file_contributors["src/components/Dashboard.tsx"] == frozenset({BOB})
    assert len(activity.file_contributors) == 3


def test_document_analysis() -> None:
    analysis = assemble(activity_from_dict(_document()))
    profiles = {p.identity: p for p in analysis.expert_profiles}

    assert profiles[ALICE].expertise_percent == 100
    assert profiles[BOB].expertise_percent == 50
    assert profiles[ALICE].specializations == ("Authentication", "Security", "TypeScript")
    assert profiles[BOB].specializations == ("Frontend", "React", "TypeScript")
    assert analysis.team_health_metrics.collaboration_metrics.knowledge_sharing == 33


def test_explicit_contributors_and_file_changes() -> None:
    doc = _document()
    doc["contributors"] = [
        {"name": "Alice", "email": ALICE, "commits": 245, "lastCommit": "2025-11-20"},
        {"name": "Bob", "email": BOB, "commits": 156, "additions": 900},
        {"name": "Ghost", "email": "ghost@example.com", "commits": 0},
    ]
    doc["fileChanges"] = {
        "./src/auth/login.ts": ["Alice"],
        "src/components/Dashboard.tsx": ["Bob", "Alice@example.com"],
    }
    activity = activity_from_dict(doc)

    assert set(activity.contributors) == {ALICE, BOB}
    assert activity.contributors[BOB].additions == 900
    # lastCommit falls back to the commit log
    assert activity.contributors[BOB].last_commit_timestamp == datetime(
        2025, 11, 19, 10, 0, tzinfo=timezone.utc
    )
    assert activity.file_contributors == {
        "src/auth/login.ts": frozenset({ALICE}),
        "src/components/Dashboard.tsx": frozenset({ALICE, BOB}),
    }

    analysis = assemble(activity)
    assert [p.expertise_percent for p in analysis.expert_profiles] == [100, 64]
    assert analysis.total_files == 2


def test_missing_repository_is_format_error() -> None:
    doc = _document()
    del doc["repository"]
    with pytest.raises(SnapshotFormatError):
        activity_from_dict(doc)


def test_commit_without_email_is_format_error() -> None:
    doc = _document()
    del doc["commits"][0]["email"]
    with pytest.raises(SnapshotFormatError):
        activity_from_dict(doc)


def test_bad_date_is_format_error() -> None:
    doc = _document()
    doc["commits"][0]["date"] = "yesterday"
    with pytest.raises(SnapshotFormatError):
        activity_from_dict(doc)


def test_load_activity_from_file(tmp_path) -> None:
    path = tmp_path / "activity.json"
    path.write_text(json.dumps(_document()), encoding="utf-8")
    assert activity_from_dict(_document()) == load_activity(path)


def test_load_activity_invalid_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotFormatError):
        load_activity(path)

    path.write_text("[]", encoding="utf-8")
    with pytest.raises(SnapshotFormatError):
        load_activity(path)


def test_load_activity_missing_file(tmp_path) -> None:
    with pytest.raises(SnapshotFormatError):
        load_activity(tmp_path / "nope.json")


# ── Timestamps ──────────────────────────────────────────────────────────────


def test_parse_timestamp_forms() -> None:
    expected = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert parse_timestamp(1_700_000_000) == expected
    assert parse_timestamp(1_700_000_000_000) == expected
    assert parse_timestamp("2023-11-14T22:13:20Z") == expected
    assert parse_timestamp("2023-11-15T00:13:20+02:00") == expected
    assert parse_timestamp(datetime(2023, 11, 14, 22, 13, 20)) == expected


def test_parse_timestamp_rejects_garbage() -> None:
    for value in (None, "", True):
        with pytest.raises(ValueError):
            parse_timestamp(value)


# ── Fingerprint ─────────────────────────────────────────────────────────────


def test_fingerprint_stable_and_sensitive() -> None:
    first = activity_fingerprint(activity_from_dict(_document()))
    assert first == activity_fingerprint(activity_from_dict(_document()))
    assert len(first) == 16

    doc = _document()
    doc["commits"].append(
        {"sha": "c4", "email": BOB, "message": "more", "date": "2025-11-21T09:00:00Z"}
    )
    assert activity_fingerprint(activity_from_dict(doc)) != first


# ── Serialization ───────────────────────────────────────────────────────────


def test_analysis_to_dict_is_json_ready() -> None:
    analysis = assemble(activity_from_dict(_document()))
    data = json.loads(json.dumps(analysis_to_dict(analysis)))

    assert data["repository"] == "acme/widgets"
    assert data["total_files"] == 3
    assert data["expert_profiles"][0]["identity"] == ALICE
    assert data["expert_profiles"][0]["last_commit"] == "2025-11-20T10:00:00+00:00"
    assert data["file_expertise"][0]["change_frequency"] in {"low", "medium", "high"}
    assert data["management_insights"][0]["category"] in {
        "Risk",
        "Opportunity",
        "Efficiency",
        "Growth",
    }
    assert data["team_health_metrics"]["collaboration_metrics"]["knowledge_sharing"] == 33


def test_enriched_to_dict_carries_narrative() -> None:
    activity = activity_from_dict(_document())
    analysis = assemble(activity)

    bare = enriched_to_dict(enrich_analysis(analysis, activity))
    assert bare["expert_profiles"][0]["team_role"] is None

    data = enriched_to_dict(enrich_analysis(analysis, activity, CommitPatternNarrator()))
    json.dumps(data)
    assert data["expert_profiles"][0]["team_role"] == "Authentication lead"
    assert data["team_health_metrics"] == analysis_to_dict(analysis)["team_health_metrics"]


def test_commit_paths_normalized() -> None:
    doc = _document()
    doc["commits"][1]["files"] = ["./src\\components\\Dashboard.tsx"]
    activity = activity_from_dict(doc)
    (record,) = [c for c in activity.commits if c.sha == "c2"]
    assert isinstance(record, CommitRecord)
    assert record.changed_paths == frozenset({"src/components/Dashboard.tsx"})


def test_null_message_reads_as_empty() -> None:
    doc = _document()
    doc["commits"][0]["message"] = None
    activity = activity_from_dict(doc)
    (record,) = [c for c in activity.commits if c.sha == "c1"]
    assert record.message == ""
    assert assemble(activity).expert_profiles[0].identity == ALICE


def test_non_string_message_is_format_error() -> None:
    doc = _document()
    doc["commits"][0]["message"] = 42
    with pytest.raises(SnapshotFormatError):
        activity_from_dict(doc)
