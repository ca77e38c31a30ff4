"""Tests for the specialization rule table and detector."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from team_xray.errors import ConfigurationError
from team_xray.models import CommitRecord
from team_xray.specializations import (
    DEFAULT_SPECIALIZATION_RULES,
    SpecializationRule,
    detect_specializations,
    validate_rules,
)

NOW = datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc)


def _commit(message: str, *paths: str, days_ago: int = 0) -> CommitRecord:
    return CommitRecord(
        author_identity="alice@example.com",
        message=message,
        timestamp=NOW - timedelta(days=days_ago),
        changed_paths=frozenset(paths),
    )


# ── Default table ──────────────────────────────────────────────────────────


def test_default_table_is_valid() -> None:
    validate_rules(DEFAULT_SPECIALIZATION_RULES)


def test_auth_keyword_maps_to_authentication() -> None:
    labels = detect_specializations([_commit("Fix AUTH token refresh")])
    assert labels[0] == "Authentication"


def test_frontend_detected_from_paths() -> None:
    labels = detect_specializations([_commit("Add dashboard", "src/ui/Dashboard.tsx")])
    assert labels == ("Frontend", "React", "TypeScript")


def test_components_directory_is_frontend() -> None:
    labels = detect_specializations([_commit("Tweak", "web/components/button.js")])
    assert "Frontend" in labels


def test_message_and_paths_combined() -> None:
    labels = detect_specializations([
        _commit(
            "Refactor authentication system with improved security",
            "src/auth/login.ts",
            "src/auth/security.ts",
        )
    ])
    assert labels == ("Authentication", "Security", "TypeScript")


# ── Ordering & dedup ───────────────────────────────────────────────────────


def test_labels_follow_oldest_first_order() -> None:
    """Input order is newest-first; detection still scans oldest-first."""
    commits = [
        _commit("Update README docs", days_ago=0),
        _commit("Add login endpoint", days_ago=5),
    ]
    assert detect_specializations(commits) == ("Authentication", "Backend", "Documentation")


def test_labels_are_deduplicated() -> None:
    commits = [_commit("Fix login bug", days_ago=2), _commit("Fix login bug", days_ago=1)]
    assert detect_specializations(commits) == ("Authentication", "Bug Fixing")


def test_no_match_yields_empty() -> None:
    assert detect_specializations([_commit("wip")]) == ()
    assert detect_specializations([]) == ()


# ── Custom tables ──────────────────────────────────────────────────────────


def test_custom_table_supersedes_default() -> None:
    rules = (
        SpecializationRule("Payments", message_patterns=(r"stripe",)),
        SpecializationRule("Infra", path_patterns=("terraform/*",)),
    )
    commits = [
        _commit("Integrate Stripe webhooks", days_ago=2),
        _commit("Fix auth", "terraform/main.tf", days_ago=1),
    ]
    assert detect_specializations(commits, rules) == ("Payments", "Infra")


@pytest.mark.parametrize(
    "rules",
    [
        (SpecializationRule("", message_patterns=("x",)),),
        (SpecializationRule("A", message_patterns=("x",)), SpecializationRule("A", path_patterns=("*.y",))),
        (SpecializationRule("Empty"),),
        (SpecializationRule("Broken", message_patterns=("(unclosed",)),),
        ("not a rule",),
    ],
)
def test_invalid_tables_rejected(rules) -> None:
    with pytest.raises(ConfigurationError):
        validate_rules(rules)


def test_uncompilable_pattern_reports_regex_error() -> None:
    rules = (SpecializationRule("Broken", message_patterns=("(unclosed",)),)
    with pytest.raises(ConfigurationError) as excinfo:
        validate_rules(rules)
    assert excinfo.value.details["label"] == "Broken"
    assert excinfo.value.details["error"]


@pytest.mark.parametrize(
    "rule",
    [
        SpecializationRule("Glob", path_patterns="*"),
        SpecializationRule("Words", message_patterns="auth"),
        SpecializationRule("Blank", message_patterns=("",)),
    ],
)
def test_pattern_fields_must_be_sequences_of_strings(rule) -> None:
    with pytest.raises(ConfigurationError):
        validate_rules((rule,))


# ── Keyword boundaries ─────────────────────────────────────────────────────


def test_co_author_trailer_is_not_authentication() -> None:
    commits = [_commit("Tidy parser\n\nCo-authored-by: Erin <erin@example.com>")]
    assert detect_specializations(commits) == ()
    assert detect_specializations([_commit("Update author list")]) == ()
    assert detect_specializations([_commit("Add auth middleware")]) == ("Authentication",)
