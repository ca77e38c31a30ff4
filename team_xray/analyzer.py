"""Analysis assembler: the single entry point of the expertise engine.

``assemble`` is pure: it performs no I/O, keeps no state between calls and
either returns a complete ``ExpertiseAnalysis`` or raises.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from team_xray.config import COLLABORATION_PATTERNS
from team_xray.health import evaluate_team_health, validate_patterns
from team_xray.insights import DEFAULT_INSIGHT_RULES, InsightRule, synthesize_insights
from team_xray.insights import validate_rules as validate_insight_rules
from team_xray.models import CoreProfile, ExpertiseAnalysis, FileExpert, RepositoryActivity
from team_xray.ownership import map_file_ownership
from team_xray.scoring import compute_scores, ranked
from team_xray.specializations import (
    DEFAULT_SPECIALIZATION_RULES,
    SpecializationRule,
    detect_specializations,
)
from team_xray.specializations import validate_rules as validate_specialization_rules
from team_xray.validation import validate_activity


@dataclass(frozen=True)
class AnalysisOptions:
    """Caller-supplied rule tables; defaults reproduce the stock analysis."""

    specialization_rules: Sequence[SpecializationRule] = DEFAULT_SPECIALIZATION_RULES
    insight_rules: Sequence[InsightRule] = DEFAULT_INSIGHT_RULES
    collaboration_patterns: Sequence[str] = COLLABORATION_PATTERNS


def assemble(
    activity: RepositoryActivity,
    options: AnalysisOptions | None = None,
) -> ExpertiseAnalysis:
    """Build the ``ExpertiseAnalysis`` for *activity*.

    Raises ``EmptyActivityError`` for a snapshot without contributors,
    ``MalformedActivityError`` for broken cross-references and
    ``ConfigurationError`` for unusable rule tables or patterns in
    *options*.
    """
    options = options or AnalysisOptions()
    validate_activity(activity)
    validate_specialization_rules(options.specialization_rules)
    validate_insight_rules(options.insight_rules)
    validate_patterns(options.collaboration_patterns)

    scores = compute_scores(activity)

    profiles = tuple(
        CoreProfile(
            identity=score.identity,
            name=activity.contributors[score.identity].display_name,
            email=activity.contributors[score.identity].email,
            expertise_percent=score.expertise_percent,
            contributions=score.contributions,
            last_commit=score.last_commit,
            specializations=detect_specializations(
                activity.commits_by(score.identity),
                options.specialization_rules,
            ),
        )
        for score in ranked(scores)
    )

    file_expertise = map_file_ownership(activity, scores)
    health = evaluate_team_health(activity, scores, options.collaboration_patterns)
    total_files = len(activity.file_contributors)
    insights = synthesize_insights(
        scores, health, profiles, total_files, options.insight_rules
    )

    return ExpertiseAnalysis(
        repository=activity.repository_id,
        total_files=total_files,
        expert_profiles=profiles,
        file_expertise=file_expertise,
        team_health_metrics=health,
        management_insights=insights,
    )


# ── Projections ─────────────────────────────────────────────────────────────


def normalize_path(path: str) -> str:
    """Repository-relative POSIX form used as the file key."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def find_experts_for_file(analysis: ExpertiseAnalysis, path: str) -> tuple[FileExpert, ...]:
    """Ordered experts of *path* in *analysis*; empty for unknown files."""
    wanted = normalize_path(path)
    for entry in analysis.file_expertise:
        if entry.file_path == wanted:
            return entry.experts
    return ()
