"""Tests for the insight rule table."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from team_xray.errors import ConfigurationError
from team_xray.insights import (
    DEFAULT_INSIGHT_RULES,
    FALLBACK_INSIGHTS,
    InsightRule,
    synthesize_insights,
    validate_rules,
)
from team_xray.models import (
    CollaborationMetrics,
    CoreProfile,
    InsightCategory,
    InsightPriority,
    KnowledgeDistribution,
    ManagementInsight,
    TeamHealthMetrics,
)

NOW = datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc)


def _health(risk: int, sharing: int, silo_files: int = 0, share: float = 0.5) -> TeamHealthMetrics:
    return TeamHealthMetrics(
        knowledge_distribution=KnowledgeDistribution(
            risk_score=risk,
            bus_factor=1,
            top_contributor_share=share,
            silo_files=silo_files,
        ),
        collaboration_metrics=CollaborationMetrics(
            knowledge_sharing=sharing,
            collaborative_commits=0,
            shared_files=0,
        ),
    )


def _profiles(*contributions: int) -> tuple[CoreProfile, ...]:
    top = max(contributions)
    return tuple(
        CoreProfile(
            identity=f"dev{i}@example.com",
            name=f"Dev {i}",
            email=f"dev{i}@example.com",
            expertise_percent=round(100 * c / top),
            contributions=c,
            last_commit=NOW,
        )
        for i, c in enumerate(contributions)
    )


# ── Default rules ───────────────────────────────────────────────────────────


def test_high_risk_fires_single_point_of_failure() -> None:
    insights = synthesize_insights({}, _health(80, 60, share=0.9), _profiles(90, 10), total_files=4)
    assert len(insights) == 1
    assert insights[0].category is InsightCategory.RISK
    assert insights[0].priority is InsightPriority.HIGH
    assert "Dev 0" in insights[0].description
    assert insights[0].action_items


def test_rules_fire_independently_in_table_order() -> None:
    insights = synthesize_insights({}, _health(80, 10), _profiles(90, 10), total_files=4)
    assert [(i.category, i.priority) for i in insights] == [
        (InsightCategory.RISK, InsightPriority.HIGH),
        (InsightCategory.OPPORTUNITY, InsightPriority.MEDIUM),
    ]


def test_thresholds_are_strict() -> None:
    insights = synthesize_insights({}, _health(70, 50), _profiles(10, 9), total_files=0)
    assert insights == FALLBACK_INSIGHTS


def test_no_signal_returns_fallback() -> None:
    insights = synthesize_insights({}, _health(10, 80), _profiles(10, 9), total_files=3)
    assert insights == FALLBACK_INSIGHTS
    assert len(insights) >= 1
    assert insights[0].action_items


def test_knowledge_silos_rule() -> None:
    insights = synthesize_insights(
        {}, _health(10, 80, silo_files=3), _profiles(10, 9), total_files=4
    )
    assert [i.title for i in insights] == ["Many files have a single owner"]


def test_workload_and_mentoring_rules() -> None:
    insights = synthesize_insights({}, _health(20, 80), _profiles(90, 10, 10, 10), total_files=0)
    assert [i.category for i in insights] == [
        InsightCategory.EFFICIENCY,
        InsightCategory.GROWTH,
    ]
    assert "Dev 1" in insights[1].description


def test_small_teams_skip_balance_rules() -> None:
    insights = synthesize_insights({}, _health(20, 80), _profiles(90, 1), total_files=0)
    assert insights == FALLBACK_INSIGHTS


# ── Custom tables ──────────────────────────────────────────────────────────


def test_custom_rule_table() -> None:
    custom = ManagementInsight(
        category=InsightCategory.GROWTH,
        priority=InsightPriority.LOW,
        title="Always",
        description="d",
        timeline="t",
        impact="i",
        action_items=("a",),
    )
    rules = (InsightRule("always", guard=lambda ctx: True, build=lambda ctx: custom),)
    assert synthesize_insights({}, _health(99, 0), _profiles(5), 0, rules) == (custom,)


def test_default_table_is_valid() -> None:
    validate_rules(DEFAULT_INSIGHT_RULES)


@pytest.mark.parametrize(
    "rules",
    [
        (),
        (
            InsightRule("dup", guard=lambda ctx: True, build=lambda ctx: None),
            InsightRule("dup", guard=lambda ctx: True, build=lambda ctx: None),
        ),
        (InsightRule("bad", guard=True, build=lambda ctx: None),),
        (InsightRule("", guard=lambda ctx: True, build=lambda ctx: None),),
        ("not a rule",),
    ],
)
def test_invalid_tables_rejected(rules) -> None:
    with pytest.raises(ConfigurationError):
        validate_rules(rules)
