"""Domain models for Team X-Ray.

Input snapshots and output aggregates are frozen; sequences are tuples so a
finished ``ExpertiseAnalysis`` can be compared, cached and serialized without
aliasing.  Entities refer to each other by contributor identity only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath


class InsightCategory(str, Enum):
    RISK = "Risk"
    OPPORTUNITY = "Opportunity"
    EFFICIENCY = "Efficiency"
    GROWTH = "Growth"


class InsightPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ChangeFrequency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Input ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CommitRecord:
    """A single normalized commit."""

    author_identity: str  # normalized email
    message: str
    timestamp: datetime
    changed_paths: frozenset[str] = frozenset()
    sha: str = ""


@dataclass(frozen=True)
class ContributorStats:
    """Precomputed per-contributor totals."""

    identity: str
    display_name: str
    email: str
    commit_count: int
    last_commit_timestamp: datetime
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class RepositoryActivity:
    """Immutable snapshot of a repository's normalized activity.

    ``commits`` are NOT guaranteed to be chronological.  The mappings are
    treated as read-only once the snapshot is built.
    """

    repository_id: str
    commits: tuple[CommitRecord, ...]
    contributors: Mapping[str, ContributorStats]
    file_contributors: Mapping[str, frozenset[str]]

    def commits_by(self, identity: str) -> tuple[CommitRecord, ...]:
        """Commits authored by *identity*, in snapshot order."""
        return tuple(c for c in self.commits if c.author_identity == identity)


# ── Output ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ContributorScore:
    """Scoring Engine output for one contributor."""

    identity: str
    contributions: int
    expertise_percent: int
    last_commit: datetime


@dataclass(frozen=True)
class CoreProfile:
    """Deterministic expert profile; always fully populated."""

    identity: str
    name: str
    email: str
    expertise_percent: int
    contributions: int
    last_commit: datetime
    specializations: tuple[str, ...] = ()


@dataclass(frozen=True)
class EnrichedProfile:
    """A ``CoreProfile`` plus narrative fields from an optional narrator."""

    profile: CoreProfile
    team_role: str | None = None
    communication_style: str | None = None
    workload_indicator: str | None = None
    collaboration_style: str | None = None

    @property
    def is_enriched(self) -> bool:
        return any(
            v is not None
            for v in (
                self.team_role,
                self.communication_style,
                self.workload_indicator,
                self.collaboration_style,
            )
        )


@dataclass(frozen=True)
class FileExpert:
    """One ranked contributor of a file, referenced by identity."""

    identity: str
    name: str
    score: float
    touches: int


@dataclass(frozen=True)
class FileExpertise:
    file_path: str
    experts: tuple[FileExpert, ...]
    change_frequency: ChangeFrequency
    touch_count: int

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.file_path).name


@dataclass(frozen=True)
class KnowledgeDistribution:
    risk_score: int
    bus_factor: int
    top_contributor_share: float
    silo_files: int


@dataclass(frozen=True)
class CollaborationMetrics:
    knowledge_sharing: int
    collaborative_commits: int
    shared_files: int


@dataclass(frozen=True)
class TeamHealthMetrics:
    knowledge_distribution: KnowledgeDistribution
    collaboration_metrics: CollaborationMetrics


@dataclass(frozen=True)
class ManagementInsight:
    category: InsightCategory
    priority: InsightPriority
    title: str
    description: str
    timeline: str
    impact: str
    action_items: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExpertiseAnalysis:
    """Root aggregate produced by :func:`team_xray.analyzer.assemble`."""

    repository: str
    total_files: int
    expert_profiles: tuple[CoreProfile, ...]
    file_expertise: tuple[FileExpertise, ...]
    team_health_metrics: TeamHealthMetrics
    management_insights: tuple[ManagementInsight, ...]


@dataclass(frozen=True)
class EnrichedAnalysis:
    """An ``ExpertiseAnalysis`` with narrative-enriched profiles attached."""

    analysis: ExpertiseAnalysis
    profiles: tuple[EnrichedProfile, ...]
