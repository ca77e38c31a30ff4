"""Structural checks on a ``RepositoryActivity`` before analysis."""

from __future__ import annotations

from datetime import datetime

from team_xray.errors import EmptyActivityError, MalformedActivityError
from team_xray.models import RepositoryActivity


def _is_aware(dt: datetime) -> bool:
    return dt.tzinfo is not None and dt.tzinfo.utcoffset(dt) is not None


def validate_activity(activity: RepositoryActivity) -> None:
    """Raise if *activity* cannot be analysed.

    ``EmptyActivityError`` when there are no contributors; otherwise
    ``MalformedActivityError`` for the first broken cross-reference found.
    """
    if not activity.contributors:
        raise EmptyActivityError(activity.repository_id)

    for identity, stats in activity.contributors.items():
        if stats.identity != identity:
            raise MalformedActivityError(
                "contributor key does not match its identity",
                key=identity,
                identity=stats.identity,
            )
        if stats.commit_count < 1:
            raise MalformedActivityError(
                "contributor has no commits",
                identity=identity,
                commit_count=str(stats.commit_count),
            )
        if not _is_aware(stats.last_commit_timestamp):
            raise MalformedActivityError(
                "last commit timestamp must be timezone-aware",
                identity=identity,
            )

    for commit in activity.commits:
        if not _is_aware(commit.timestamp):
            raise MalformedActivityError(
                "commit timestamp must be timezone-aware",
                identity=commit.author_identity,
                sha=commit.sha,
            )
        if commit.author_identity not in activity.contributors:
            raise MalformedActivityError(
                "commit author missing from contributor map",
                identity=commit.author_identity,
                sha=commit.sha,
            )

    for path, identities in activity.file_contributors.items():
        if not identities:
            raise MalformedActivityError("file has no contributors", path=path)
        for identity in sorted(identities):
            if identity not in activity.contributors:
                raise MalformedActivityError(
                    "file references unknown contributor",
                    path=path,
                    identity=identity,
                )
