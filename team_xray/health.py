"""Team health evaluator: knowledge concentration and collaboration.

    fair_share  = 1 / contributor_count
    risk_score  = 100 * (top_share - fair_share) / (1 - fair_share)   in [0, 100]
    knowledge_sharing = 100 * collaborative_commits / total_commits

A single contributor is total concentration (risk 100).  A snapshot with no
commit log has no evidence of collaboration (sharing 0).
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from team_xray.config import BUS_FACTOR_COVERAGE, COLLABORATION_PATTERNS
from team_xray.errors import ConfigurationError
from team_xray.models import (
    CollaborationMetrics,
    CommitRecord,
    ContributorScore,
    KnowledgeDistribution,
    RepositoryActivity,
    TeamHealthMetrics,
)
from team_xray.scoring import ranked


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


# ── Knowledge distribution ──────────────────────────────────────────────────


def risk_score(commit_counts: Sequence[int]) -> int:
    """Concentration of commits on the top contributor, 0 (even) to 100."""
    n = len(commit_counts)
    total = sum(commit_counts)
    if n <= 1 or total <= 0:
        return 100
    top_share = max(commit_counts) / total
    fair_share = 1 / n
    raw = 100 * (top_share - fair_share) / (1 - fair_share)
    return _round_half_up(min(100.0, max(0.0, raw)))


def bus_factor(commit_counts: Sequence[int], coverage: float = BUS_FACTOR_COVERAGE) -> int:
    """Minimum number of contributors whose commits cover *coverage* of all."""
    total = sum(commit_counts)
    if total == 0:
        return 0
    cumulative = 0
    for i, count in enumerate(sorted(commit_counts, reverse=True), start=1):
        cumulative += count
        if cumulative / total >= coverage:
            return i
    return len(commit_counts)


# ── Collaboration ───────────────────────────────────────────────────────────


def validate_patterns(patterns: Sequence[str]) -> None:
    """Raise ``ConfigurationError`` unless every collaboration pattern compiles."""
    if isinstance(patterns, str):
        raise ConfigurationError("collaboration patterns must be a sequence of regexes")
    for index, pattern in enumerate(patterns):
        if not isinstance(pattern, str) or not pattern:
            raise ConfigurationError(
                "collaboration pattern must be a non-empty string", index=str(index)
            )
        try:
            re.compile(pattern, re.IGNORECASE)
        except re.error as exc:
            raise ConfigurationError(
                "invalid collaboration pattern", pattern=pattern, error=str(exc)
            ) from exc


def is_collaborative(
    commit: CommitRecord,
    patterns: Sequence[str] = COLLABORATION_PATTERNS,
) -> bool:
    return any(re.search(p, commit.message, re.IGNORECASE) for p in patterns)


def knowledge_sharing(
    commits: Sequence[CommitRecord],
    patterns: Sequence[str] = COLLABORATION_PATTERNS,
) -> tuple[int, int]:
    """Return ``(percent, collaborative_commit_count)``."""
    if not commits:
        return 0, 0
    matched = sum(1 for c in commits if is_collaborative(c, patterns))
    return _round_half_up(100 * matched / len(commits)), matched


# ── Evaluator ───────────────────────────────────────────────────────────────


def evaluate_team_health(
    activity: RepositoryActivity,
    scores: dict[str, ContributorScore],
    collaboration_patterns: Sequence[str] = COLLABORATION_PATTERNS,
) -> TeamHealthMetrics:
    """Compute ``TeamHealthMetrics`` for *activity*."""
    counts = [s.contributions for s in ranked(scores)]
    total = sum(counts)
    sharing, collaborative = knowledge_sharing(activity.commits, collaboration_patterns)
    owners_per_file = [len(ids) for ids in activity.file_contributors.values()]

    return TeamHealthMetrics(
        knowledge_distribution=KnowledgeDistribution(
            risk_score=risk_score(counts),
            bus_factor=bus_factor(counts),
            top_contributor_share=round(counts[0] / total, 3) if total else 0.0,
            silo_files=sum(1 for n in owners_per_file if n == 1),
        ),
        collaboration_metrics=CollaborationMetrics(
            knowledge_sharing=sharing,
            collaborative_commits=collaborative,
            shared_files=sum(1 for n in owners_per_file if n >= 2),
        ),
    )
