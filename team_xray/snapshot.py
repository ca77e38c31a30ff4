"""Reading activity snapshots and writing analysis results as JSON.

A snapshot document looks like::

    {
      "repository": "owner/repo",
      "commits": [
        {"sha": "...", "author": "Alice", "email": "alice@example.com",
         "message": "...", "date": "2025-11-20T10:00:00Z", "files": ["src/a.py"]}
      ],
      "contributors": [                       # optional
        {"name": "Alice", "email": "alice@example.com", "commits": 12,
         "additions": 340, "deletions": 120, "lastCommit": "2025-11-20"}
      ],
      "fileChanges": {"src/a.py": ["alice@example.com"]}   # optional
    }

Missing ``contributors`` / ``fileChanges`` sections are derived from the
commit list.  Identities are lower-cased emails.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from team_xray.analyzer import normalize_path
from team_xray.errors import SnapshotFormatError
from team_xray.models import (
    CommitRecord,
    ContributorStats,
    CoreProfile,
    EnrichedAnalysis,
    ExpertiseAnalysis,
    RepositoryActivity,
)

logger = logging.getLogger(__name__)


def normalize_identity(email: str) -> str:
    return email.strip().lower()


def parse_timestamp(value: Any) -> datetime:
    """ISO-8601 string or Unix epoch (seconds or milliseconds) → aware UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 9_999_999_999 else value
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    elif isinstance(value, str) and value:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"unsupported timestamp: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# ── Building snapshots ──────────────────────────────────────────────────────


def build_activity(
    repository_id: str,
    commits: Iterable[CommitRecord],
    names: Mapping[str, str] | None = None,
) -> RepositoryActivity:
    """Derive contributor stats and the file map from normalized commits.

    *names* maps identity → display name; the identity is used otherwise.
    """
    names = names or {}
    commits = tuple(commits)

    counts: Counter[str] = Counter()
    latest: dict[str, datetime] = {}
    file_map: dict[str, set[str]] = defaultdict(set)
    for commit in commits:
        identity = commit.author_identity
        counts[identity] += 1
        if identity not in latest or commit.timestamp > latest[identity]:
            latest[identity] = commit.timestamp
        for path in commit.changed_paths:
            file_map[path].add(identity)

    contributors = {
        identity: ContributorStats(
            identity=identity,
            display_name=names.get(identity, identity),
            email=identity,
            commit_count=counts[identity],
            last_commit_timestamp=latest[identity],
        )
        for identity in sorted(counts)
    }
    return RepositoryActivity(
        repository_id=repository_id,
        commits=commits,
        contributors=contributors,
        file_contributors={p: frozenset(ids) for p, ids in sorted(file_map.items())},
    )


def _parse_commit(raw: Mapping[str, Any]) -> tuple[CommitRecord, str]:
    email = raw.get("email") or raw.get("authorEmail")
    if not email:
        raise KeyError("email")
    identity = normalize_identity(email)
    message = raw.get("message") or ""
    if not isinstance(message, str):
        raise TypeError(f"commit message must be a string, got {type(message).__name__}")
    record = CommitRecord(
        author_identity=identity,
        message=message,
        timestamp=parse_timestamp(raw.get("date") or raw.get("timestamp")),
        changed_paths=frozenset(normalize_path(p) for p in raw.get("files") or []),
        sha=raw.get("sha", ""),
    )
    return record, raw.get("author") or email


def activity_from_dict(raw: Mapping[str, Any], source: str = "<dict>") -> RepositoryActivity:
    """Convert a snapshot document into a ``RepositoryActivity``."""
    try:
        repository_id = raw["repository"]
        commits: list[CommitRecord] = []
        names: dict[str, str] = {}
        for item in raw.get("commits") or []:
            record, name = _parse_commit(item)
            commits.append(record)
            names.setdefault(record.author_identity, name)

        derived = build_activity(repository_id, commits, names)

        contributors = dict(derived.contributors)
        if raw.get("contributors"):
            contributors = {}
            for item in raw["contributors"]:
                identity = normalize_identity(item["email"])
                commit_count = int(item.get("commits", 0))
                if commit_count < 1:
                    logger.debug("Skipping zero-commit contributor %s", identity)
                    continue
                last = item.get("lastCommit")
                if last is not None:
                    last_commit = parse_timestamp(last)
                elif identity in derived.contributors:
                    last_commit = derived.contributors[identity].last_commit_timestamp
                else:
                    raise ValueError(f"no lastCommit for contributor {identity}")
                contributors[identity] = ContributorStats(
                    identity=identity,
                    display_name=item.get("name") or names.get(identity, identity),
                    email=item["email"].strip(),
                    commit_count=commit_count,
                    last_commit_timestamp=last_commit,
                    additions=int(item.get("additions", 0)),
                    deletions=int(item.get("deletions", 0)),
                )

        file_contributors = dict(derived.file_contributors)
        if raw.get("fileChanges"):
            by_name = {s.display_name: i for i, s in contributors.items()}
            file_contributors = {}
            for path, people in sorted(raw["fileChanges"].items()):
                file_contributors[normalize_path(path)] = frozenset(
                    by_name.get(p, normalize_identity(p)) for p in people
                )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise SnapshotFormatError(source, f"{type(exc).__name__}: {exc}") from exc

    logger.info(
        "Loaded %s: %d commits, %d contributors, %d files",
        repository_id,
        len(commits),
        len(contributors),
        len(file_contributors),
    )
    return RepositoryActivity(
        repository_id=repository_id,
        commits=tuple(commits),
        contributors=contributors,
        file_contributors=file_contributors,
    )


def load_activity(path: Path) -> RepositoryActivity:
    """Read a JSON snapshot file."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SnapshotFormatError(str(path), str(exc)) from exc
    if not isinstance(raw, dict):
        raise SnapshotFormatError(str(path), "top-level JSON value must be an object")
    return activity_from_dict(raw, source=str(path))


def activity_fingerprint(activity: RepositoryActivity) -> str:
    """Content key for caching one analysis per snapshot."""
    latest = max(activity.commits, key=lambda c: (c.timestamp, c.sha), default=None)
    parts = [
        activity.repository_id,
        latest.sha if latest else "",
        latest.timestamp.isoformat() if latest else "",
        str(len(activity.commits)),
        str(len(activity.contributors)),
    ]
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()[:16]


# ── Serialization ───────────────────────────────────────────────────────────


def _profile_to_dict(p: CoreProfile) -> dict[str, Any]:
    return {
        "identity": p.identity,
        "name": p.name,
        "email": p.email,
        "expertise_percent": p.expertise_percent,
        "contributions": p.contributions,
        "last_commit": p.last_commit.isoformat(),
        "specializations": list(p.specializations),
    }


def analysis_to_dict(analysis: ExpertiseAnalysis) -> dict[str, Any]:
    """JSON-ready representation; enums by value, timestamps ISO-8601."""
    health = analysis.team_health_metrics
    kd = health.knowledge_distribution
    cm = health.collaboration_metrics
    return {
        "repository": analysis.repository,
        "total_files": analysis.total_files,
        "expert_profiles": [_profile_to_dict(p) for p in analysis.expert_profiles],
        "file_expertise": [
            {
                "file_path": f.file_path,
                "file_name": f.file_name,
                "change_frequency": f.change_frequency.value,
                "touch_count": f.touch_count,
                "experts": [
                    {
                        "identity": e.identity,
                        "name": e.name,
                        "score": e.score,
                        "touches": e.touches,
                    }
                    for e in f.experts
                ],
            }
            for f in analysis.file_expertise
        ],
        "team_health_metrics": {
            "knowledge_distribution": {
                "risk_score": kd.risk_score,
                "bus_factor": kd.bus_factor,
                "top_contributor_share": kd.top_contributor_share,
                "silo_files": kd.silo_files,
            },
            "collaboration_metrics": {
                "knowledge_sharing": cm.knowledge_sharing,
                "collaborative_commits": cm.collaborative_commits,
                "shared_files": cm.shared_files,
            },
        },
        "management_insights": [
            {
                "category": i.category.value,
                "priority": i.priority.value,
                "title": i.title,
                "description": i.description,
                "timeline": i.timeline,
                "impact": i.impact,
                "action_items": list(i.action_items),
            }
            for i in analysis.management_insights
        ],
    }


def enriched_to_dict(enriched: EnrichedAnalysis) -> dict[str, Any]:
    """``analysis_to_dict`` with narrative fields merged into each profile."""
    data = analysis_to_dict(enriched.analysis)
    by_identity = {e.profile.identity: e for e in enriched.profiles}
    for profile in data["expert_profiles"]:
        extra = by_identity.get(profile["identity"])
        profile["team_role"] = extra.team_role if extra else None
        profile["communication_style"] = extra.communication_style if extra else None
        profile["workload_indicator"] = extra.workload_indicator if extra else None
        profile["collaboration_style"] = extra.collaboration_style if extra else None
    return data
