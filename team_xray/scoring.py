"""Scoring engine: per-contributor contributions and expertise percent.

Implements:
    contributions     = ContributorStats.commit_count
    expertise_percent = round(100 * contributions / max_contributions)

Key invariants:
    - Rounding is half-up on exact integer arithmetic, so the result never
      depends on float representation.
    - The top contributor (or every contributor tied with them) is at 100.
    - Recency is derived from commit timestamps, never from log order.
"""

from __future__ import annotations

from datetime import datetime

from team_xray.errors import EmptyActivityError
from team_xray.models import ContributorScore, RepositoryActivity


def percent_of(value: int, maximum: int) -> int:
    """``round(100 * value / maximum)`` with halves rounded up."""
    return (200 * value + maximum) // (2 * maximum)


def latest_commit_times(activity: RepositoryActivity) -> dict[str, datetime]:
    """Most recent commit per contributor.

    Starts from the precomputed ``last_commit_timestamp`` and moves forward
    for any later commit present in the log.
    """
    latest = {
        identity: stats.last_commit_timestamp
        for identity, stats in activity.contributors.items()
    }
    for commit in activity.commits:
        current = latest.get(commit.author_identity)
        if current is None or commit.timestamp > current:
            latest[commit.author_identity] = commit.timestamp
    return latest


def compute_scores(activity: RepositoryActivity) -> dict[str, ContributorScore]:
    """Score every contributor in *activity*.

    Raises ``EmptyActivityError`` when the snapshot has no contributors.
    """
    if not activity.contributors:
        raise EmptyActivityError(activity.repository_id)

    max_contributions = max(s.commit_count for s in activity.contributors.values())
    latest = latest_commit_times(activity)

    return {
        identity: ContributorScore(
            identity=identity,
            contributions=stats.commit_count,
            expertise_percent=percent_of(stats.commit_count, max_contributions),
            last_commit=latest[identity],
        )
        for identity, stats in activity.contributors.items()
    }


def rank_key(score: ContributorScore) -> tuple:
    """Sort key: percent desc, contributions desc, recency desc, identity asc."""
    return (
        -score.expertise_percent,
        -score.contributions,
        -score.last_commit.timestamp(),
        score.identity,
    )


def ranked(scores: dict[str, ContributorScore]) -> list[ContributorScore]:
    """Scores in stable display order."""
    return sorted(scores.values(), key=rank_key)
