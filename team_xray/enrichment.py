"""Optional narrative enrichment applied after the core analysis.

A ``Narrator`` attaches descriptive fields to each profile.  It never sees
or changes numeric results, and a failing narrator only costs the narrative:
the profile is returned bare and the failure is logged.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from team_xray.config import COLLABORATION_PATTERNS
from team_xray.health import is_collaborative
from team_xray.models import (
    CommitRecord,
    CoreProfile,
    EnrichedAnalysis,
    EnrichedProfile,
    ExpertiseAnalysis,
    RepositoryActivity,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Narrative:
    team_role: str | None = None
    communication_style: str | None = None
    workload_indicator: str | None = None
    collaboration_style: str | None = None


class Narrator(Protocol):
    def describe(
        self,
        profile: CoreProfile,
        commits: Sequence[CommitRecord],
        team: Sequence[CoreProfile],
    ) -> Narrative: ...


class CommitPatternNarrator:
    """Deterministic narrator reading review/mentoring patterns in commits."""

    def __init__(self, patterns: Sequence[str] = COLLABORATION_PATTERNS) -> None:
        self._patterns = tuple(patterns)

    def describe(
        self,
        profile: CoreProfile,
        commits: Sequence[CommitRecord],
        team: Sequence[CoreProfile],
    ) -> Narrative:
        collaborative = sum(1 for c in commits if is_collaborative(c, self._patterns))
        ratio = collaborative / len(commits) if commits else 0.0
        median = statistics.median(p.contributions for p in team) if team else 0

        if profile.contributions >= 2 * median and len(team) > 1:
            workload = "High"
        elif profile.contributions * 2 <= median:
            workload = "Light"
        else:
            workload = "Balanced"

        focus = profile.specializations[0] if profile.specializations else None
        if profile.expertise_percent >= 80:
            role = f"{focus} lead" if focus else "Core maintainer"
        elif profile.expertise_percent >= 40:
            role = f"{focus} contributor" if focus else "Regular contributor"
        else:
            role = "Occasional contributor"

        return Narrative(
            team_role=role,
            communication_style=(
                "Collaborative and supportive" if collaborative
                else "Focused individual contributor"
            ),
            workload_indicator=workload,
            collaboration_style=(
                "Reviewer and integrator" if ratio >= 0.3
                else "Pairs occasionally" if collaborative
                else "Works independently"
            ),
        )


def _enrich_one(
    narrator: Narrator,
    profile: CoreProfile,
    activity: RepositoryActivity,
    team: Sequence[CoreProfile],
) -> EnrichedProfile:
    try:
        narrative = narrator.describe(profile, activity.commits_by(profile.identity), team)
    except Exception:
        logger.warning(
            "Narrator %s failed for %s; keeping core profile",
            type(narrator).__name__,
            profile.identity,
            exc_info=True,
        )
        return EnrichedProfile(profile=profile)
    return EnrichedProfile(
        profile=profile,
        team_role=narrative.team_role,
        communication_style=narrative.communication_style,
        workload_indicator=narrative.workload_indicator,
        collaboration_style=narrative.collaboration_style,
    )


def enrich_analysis(
    analysis: ExpertiseAnalysis,
    activity: RepositoryActivity,
    narrator: Narrator | None = None,
) -> EnrichedAnalysis:
    """Attach narrative fields to every profile of *analysis*.

    Without a narrator every ``EnrichedProfile`` carries only the core
    profile and ``None`` narrative fields.
    """
    team = analysis.expert_profiles
    if narrator is None:
        profiles = tuple(EnrichedProfile(profile=p) for p in team)
    else:
        profiles = tuple(_enrich_one(narrator, p, activity, team) for p in team)
        logger.debug(
            "Enriched %d/%d profiles",
            sum(1 for p in profiles if p.is_enriched),
            len(profiles),
        )
    return EnrichedAnalysis(analysis=analysis, profiles=profiles)
