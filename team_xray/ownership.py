"""File ownership mapper: ranked experts and change frequency per file."""

from __future__ import annotations

import bisect
from collections import Counter, defaultdict

from team_xray.config import CHANGE_FREQUENCY_CUTS, FILE_SCORE_DECIMALS
from team_xray.models import (
    ChangeFrequency,
    ContributorScore,
    FileExpert,
    FileExpertise,
    RepositoryActivity,
)

# ── Touch counting ──────────────────────────────────────────────────────────


def count_touches(activity: RepositoryActivity) -> dict[str, Counter[str]]:
    """``touches[path][identity]`` = commits by identity that changed path.

    Only paths present in ``file_contributors`` are counted.  A listed
    contributor that no commit in the log attributes to the file is still
    credited with a single touch: the file map itself attests it.
    """
    touches: dict[str, Counter[str]] = defaultdict(Counter)
    for commit in activity.commits:
        for path in commit.changed_paths:
            if commit.author_identity in activity.file_contributors.get(path, ()):
                touches[path][commit.author_identity] += 1

    for path, identities in activity.file_contributors.items():
        counter = touches[path]
        for identity in identities:
            if counter[identity] == 0:
                counter[identity] = 1
    return dict(touches)


# ── Change frequency ────────────────────────────────────────────────────────


def change_frequency_tiers(
    touch_counts: dict[str, int],
    cuts: tuple[float, float] = CHANGE_FREQUENCY_CUTS,
) -> dict[str, ChangeFrequency]:
    """Tier each file by the mid-rank percentile of its touch count.

    ``percentile = (files_below + 0.5 * files_equal) / total_files``.  Equal
    counts always land in the same tier and a larger count never lands in a
    lower tier.
    """
    if not touch_counts:
        return {}
    ordered = sorted(touch_counts.values())
    n = len(ordered)
    low_cut, high_cut = cuts

    tiers: dict[str, ChangeFrequency] = {}
    for path, count in touch_counts.items():
        below = bisect.bisect_left(ordered, count)
        equal = bisect.bisect_right(ordered, count) - below
        percentile = (below + 0.5 * equal) / n
        if percentile < low_cut:
            tiers[path] = ChangeFrequency.LOW
        elif percentile < high_cut:
            tiers[path] = ChangeFrequency.MEDIUM
        else:
            tiers[path] = ChangeFrequency.HIGH
    return tiers


# ── Ranking ─────────────────────────────────────────────────────────────────


def map_file_ownership(
    activity: RepositoryActivity,
    scores: dict[str, ContributorScore],
) -> tuple[FileExpertise, ...]:
    """One ``FileExpertise`` per path in the snapshot, ordered by path.

    ``score = expertise_percent * touches / total_touches_on_file``; ties go
    to the more recent committer, then to the lower identity.
    """
    touches = count_touches(activity)
    totals = {path: sum(counter.values()) for path, counter in touches.items()}
    tiers = change_frequency_tiers(totals)

    result: list[FileExpertise] = []
    for path in sorted(activity.file_contributors):
        counter = touches[path]
        total = totals[path]
        experts = []
        for identity in activity.file_contributors[path]:
            score = scores[identity]
            weighted = score.expertise_percent * counter[identity] / total
            experts.append((
                round(weighted, FILE_SCORE_DECIMALS),
                -score.last_commit.timestamp(),
                identity,
                counter[identity],
            ))
        experts.sort(key=lambda e: (-e[0], e[1], e[2]))

        result.append(FileExpertise(
            file_path=path,
            experts=tuple(
                FileExpert(
                    identity=identity,
                    name=activity.contributors[identity].display_name,
                    score=weighted,
                    touches=count,
                )
                for weighted, _recency, identity, count in experts
            ),
            change_frequency=tiers[path],
            touch_count=total,
        ))
    return tuple(result)
