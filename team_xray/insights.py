"""Insight synthesizer: a rule table evaluated over computed metrics.

Every rule whose guard holds fires; output follows table order and is never
re-sorted.  When nothing fires the fallback set is returned, so a finished
analysis always carries at least one insight.
"""

from __future__ import annotations

import statistics
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from team_xray.config import (
    GROWTH_EXPERTISE_THRESHOLD,
    KNOWLEDGE_SHARING_THRESHOLD,
    MIN_TEAM_SIZE_FOR_BALANCE,
    RISK_SCORE_THRESHOLD,
    SILO_RATIO_THRESHOLD,
    WORKLOAD_RATIO_THRESHOLD,
)
from team_xray.errors import ConfigurationError
from team_xray.models import (
    ContributorScore,
    CoreProfile,
    InsightCategory,
    InsightPriority,
    ManagementInsight,
    TeamHealthMetrics,
)


@dataclass(frozen=True)
class InsightContext:
    """Everything a rule may look at."""

    scores: dict[str, ContributorScore]
    health: TeamHealthMetrics
    profiles: tuple[CoreProfile, ...]
    total_files: int

    @property
    def contributor_count(self) -> int:
        return len(self.profiles)

    @property
    def top(self) -> CoreProfile:
        return self.profiles[0]

    @property
    def median_contributions(self) -> float:
        return statistics.median(p.contributions for p in self.profiles)

    @property
    def silo_ratio(self) -> float:
        if not self.total_files:
            return 0.0
        return self.health.knowledge_distribution.silo_files / self.total_files


@dataclass(frozen=True)
class InsightRule:
    name: str
    guard: Callable[[InsightContext], bool]
    build: Callable[[InsightContext], ManagementInsight]


# ── Default rules ───────────────────────────────────────────────────────────


def _single_point_of_failure(ctx: InsightContext) -> ManagementInsight:
    share = ctx.health.knowledge_distribution.top_contributor_share
    return ManagementInsight(
        category=InsightCategory.RISK,
        priority=InsightPriority.HIGH,
        title="Knowledge concentrated in one contributor",
        description=(
            f"{ctx.top.name} accounts for {share:.0%} of all commits "
            f"(risk score {ctx.health.knowledge_distribution.risk_score}). "
            "Losing them would stall most of the codebase."
        ),
        timeline="Next 30 days",
        impact="Reduces single-point-of-failure risk",
        action_items=(
            "Implement regular knowledge sharing sessions and documentation sprints",
            f"Pair {ctx.top.name} with a second owner on their most-touched files",
            "Route reviews of critical areas through at least two people",
        ),
    )


def _collaboration_gaps(ctx: InsightContext) -> ManagementInsight:
    sharing = ctx.health.collaboration_metrics.knowledge_sharing
    return ManagementInsight(
        category=InsightCategory.OPPORTUNITY,
        priority=InsightPriority.MEDIUM,
        title="Limited visible collaboration",
        description=(
            f"Only {sharing}% of commits show review, pairing or merge activity."
        ),
        timeline="Next quarter",
        impact="Spreads context and catches defects earlier",
        action_items=(
            "Establish regular code review rotations and pair programming sessions",
            "Credit reviewers and pair partners in commit messages",
        ),
    )


def _knowledge_silos(ctx: InsightContext) -> ManagementInsight:
    silos = ctx.health.knowledge_distribution.silo_files
    return ManagementInsight(
        category=InsightCategory.RISK,
        priority=InsightPriority.MEDIUM,
        title="Many files have a single owner",
        description=(
            f"{silos} of {ctx.total_files} files were only ever changed by one person."
        ),
        timeline="Next quarter",
        impact="Fewer areas nobody else can maintain",
        action_items=(
            "Rotate ownership of single-owner files during routine maintenance",
            "Document key workflows and architectural decisions",
        ),
    )


def _workload_imbalance(ctx: InsightContext) -> ManagementInsight:
    return ManagementInsight(
        category=InsightCategory.EFFICIENCY,
        priority=InsightPriority.MEDIUM,
        title="Uneven workload across the team",
        description=(
            f"{ctx.top.name} has {ctx.top.contributions} commits against a team "
            f"median of {ctx.median_contributions:g}."
        ),
        timeline="Next sprint",
        impact="Lower burnout risk and faster throughput",
        action_items=(
            f"Review {ctx.top.name}'s current assignments for work that can move",
            "Balance new feature work across contributors",
        ),
    )


def _mentoring_opportunity(ctx: InsightContext) -> ManagementInsight:
    juniors = [p.name for p in ctx.profiles if p.expertise_percent < GROWTH_EXPERTISE_THRESHOLD]
    return ManagementInsight(
        category=InsightCategory.GROWTH,
        priority=InsightPriority.LOW,
        title="Contributors ready for mentoring",
        description=(
            f"{len(juniors)} contributor(s) are below {GROWTH_EXPERTISE_THRESHOLD}% "
            f"expertise: {', '.join(juniors)}."
        ),
        timeline="Ongoing",
        impact="Grows the number of people who can own core areas",
        action_items=(
            "Pair newer contributors with established experts",
            "Assign starter tasks in the most actively changed files",
        ),
    )


DEFAULT_INSIGHT_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        "single-point-of-failure",
        guard=lambda ctx: ctx.health.knowledge_distribution.risk_score > RISK_SCORE_THRESHOLD,
        build=_single_point_of_failure,
    ),
    InsightRule(
        "collaboration-gaps",
        guard=lambda ctx: (
            ctx.health.collaboration_metrics.knowledge_sharing < KNOWLEDGE_SHARING_THRESHOLD
        ),
        build=_collaboration_gaps,
    ),
    InsightRule(
        "knowledge-silos",
        guard=lambda ctx: ctx.contributor_count > 1 and ctx.silo_ratio >= SILO_RATIO_THRESHOLD,
        build=_knowledge_silos,
    ),
    InsightRule(
        "workload-imbalance",
        guard=lambda ctx: (
            ctx.contributor_count >= MIN_TEAM_SIZE_FOR_BALANCE
            and ctx.top.contributions >= WORKLOAD_RATIO_THRESHOLD * ctx.median_contributions
        ),
        build=_workload_imbalance,
    ),
    InsightRule(
        "mentoring-opportunity",
        guard=lambda ctx: (
            ctx.contributor_count >= MIN_TEAM_SIZE_FOR_BALANCE
            and any(p.expertise_percent < GROWTH_EXPERTISE_THRESHOLD for p in ctx.profiles)
        ),
        build=_mentoring_opportunity,
    ),
)

FALLBACK_INSIGHTS: tuple[ManagementInsight, ...] = (
    ManagementInsight(
        category=InsightCategory.GROWTH,
        priority=InsightPriority.LOW,
        title="No acute team-health signal",
        description="Knowledge is reasonably spread and collaboration is visible.",
        timeline="Ongoing",
        impact="Keeps the current healthy distribution of knowledge",
        action_items=(
            "Consider implementing pair programming sessions to distribute knowledge",
            "Document key workflows and architectural decisions",
            "Set up regular technical sharing sessions",
        ),
    ),
)


# ── Evaluation ──────────────────────────────────────────────────────────────


def validate_rules(rules: Sequence[InsightRule]) -> None:
    """Raise ``ConfigurationError`` if *rules* is not a usable table."""
    if not rules:
        raise ConfigurationError("insight rule table is empty")
    seen: set[str] = set()
    for index, rule in enumerate(rules):
        if not isinstance(rule, InsightRule):
            raise ConfigurationError(
                "insight table entries must be InsightRule", index=str(index)
            )
        if not rule.name:
            raise ConfigurationError("insight rule has no name", index=str(index))
        if rule.name in seen:
            raise ConfigurationError("duplicate insight rule", name=rule.name)
        seen.add(rule.name)
        if not callable(rule.guard) or not callable(rule.build):
            raise ConfigurationError("insight rule guard/build must be callable", name=rule.name)


def synthesize_insights(
    scores: dict[str, ContributorScore],
    health: TeamHealthMetrics,
    profiles: Sequence[CoreProfile],
    total_files: int,
    rules: Sequence[InsightRule] = DEFAULT_INSIGHT_RULES,
) -> tuple[ManagementInsight, ...]:
    """Fire every matching rule in table order; fall back when none match."""
    ctx = InsightContext(
        scores=scores,
        health=health,
        profiles=tuple(profiles),
        total_files=total_files,
    )
    fired = tuple(rule.build(ctx) for rule in rules if rule.guard(ctx))
    return fired or FALLBACK_INSIGHTS
