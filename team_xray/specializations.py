"""Specialization detector driven by a declarative rule table.

Each ``SpecializationRule`` maps case-insensitive message patterns (regular
expressions searched in the commit message) and path globs (``fnmatch``
against the full path or the basename) to one label.  A contributor gets a
label as soon as one of their commits matches it.
"""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache

from team_xray.errors import ConfigurationError
from team_xray.models import CommitRecord


@dataclass(frozen=True)
class SpecializationRule:
    label: str
    message_patterns: tuple[str, ...] = ()
    path_patterns: tuple[str, ...] = ()


DEFAULT_SPECIALIZATION_RULES: tuple[SpecializationRule, ...] = (
    SpecializationRule(
        "Authentication",
        message_patterns=(r"\bauth(?!or)", r"\blog ?in\b", r"\bsign ?in\b", r"\bjwt\b", r"\bsso\b", r"\bsession"),
        path_patterns=("auth/*", "*/auth/*", "*auth*.*", "*login*.*"),
    ),
    SpecializationRule(
        "Security",
        message_patterns=(r"secur", r"vulnerab", r"\bcve-", r"\bxss\b", r"\bcsrf\b", r"encrypt", r"sanitiz"),
        path_patterns=("security/*", "*/security/*", "*security*.*"),
    ),
    SpecializationRule(
        "Frontend",
        message_patterns=(r"\bui\b", r"\bux\b", r"frontend", r"\bcomponents?\b", r"\bcss\b", r"\blayout\b"),
        path_patterns=(
            "*.tsx", "*.jsx", "*.vue", "*.svelte", "*.css", "*.scss", "*.html",
            "ui/*", "*/ui/*", "components/*", "*/components/*",
        ),
    ),
    SpecializationRule(
        "React",
        message_patterns=(r"\breact\b", r"\bhooks?\b", r"\bjsx\b"),
        path_patterns=("*.tsx", "*.jsx"),
    ),
    SpecializationRule(
        "TypeScript",
        message_patterns=(r"typescript", r"\btypes?\b"),
        path_patterns=("*.ts", "*.tsx"),
    ),
    SpecializationRule(
        "Backend",
        message_patterns=(r"backend", r"\bapi\b", r"\bendpoints?\b", r"\bserver\b", r"\bhandlers?\b"),
        path_patterns=("api/*", "*/api/*", "server/*", "*/server/*", "backend/*", "*/backend/*"),
    ),
    SpecializationRule(
        "Database",
        message_patterns=(r"database", r"\bdb\b", r"\bsql\b", r"\bmigrations?\b", r"\bschema\b", r"\bquer(y|ies)\b"),
        path_patterns=("*.sql", "migrations/*", "*/migrations/*", "*schema*.*"),
    ),
    SpecializationRule(
        "Testing",
        message_patterns=(r"\btests?\b", r"\btesting\b", r"\bcoverage\b", r"\bspecs?\b"),
        path_patterns=(
            "test/*", "tests/*", "*/test/*", "*/tests/*", "__tests__/*", "*/__tests__/*",
            "*.test.*", "*.spec.*", "test_*.py", "*_test.py", "*_test.go",
        ),
    ),
    SpecializationRule(
        "DevOps",
        message_patterns=(r"\bci\b", r"\bcd\b", r"pipeline", r"docker", r"deploy", r"\bworkflows?\b", r"kubernetes|\bk8s\b"),
        path_patterns=(
            ".github/workflows/*", "Dockerfile", "*.dockerfile", "docker-compose*.yml",
            "*.tf", "k8s/*", "*/k8s/*", "Jenkinsfile", ".gitlab-ci.yml",
        ),
    ),
    SpecializationRule(
        "Documentation",
        message_patterns=(r"\bdocs?\b", r"documentation", r"readme", r"changelog"),
        path_patterns=("*.md", "*.rst", "docs/*", "*/docs/*"),
    ),
    SpecializationRule(
        "Performance",
        message_patterns=(r"\bperf\b", r"performance", r"optimi[sz]", r"\bcach(e|ing)\b", r"\bspeed ?up\b"),
    ),
    SpecializationRule(
        "Bug Fixing",
        message_patterns=(r"\bfix(e[sd])?\b", r"\bbugs?\b", r"\bhotfix\b", r"regression"),
    ),
)


# ── Table validation ────────────────────────────────────────────────────────


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def validate_rules(rules: Sequence[SpecializationRule]) -> None:
    """Raise ``ConfigurationError`` if *rules* is not a usable table."""
    seen: set[str] = set()
    for index, rule in enumerate(rules):
        if not isinstance(rule, SpecializationRule):
            raise ConfigurationError(
                "specialization table entries must be SpecializationRule",
                index=str(index),
            )
        if not rule.label or not rule.label.strip():
            raise ConfigurationError("specialization rule has no label", index=str(index))
        if rule.label in seen:
            raise ConfigurationError("duplicate specialization label", label=rule.label)
        seen.add(rule.label)
        for field in ("message_patterns", "path_patterns"):
            value = getattr(rule, field)
            if isinstance(value, str) or not isinstance(value, (tuple, list)):
                raise ConfigurationError(
                    f"{field} must be a tuple of patterns", label=rule.label
                )
            if not all(isinstance(p, str) and p for p in value):
                raise ConfigurationError(
                    f"{field} entries must be non-empty strings", label=rule.label
                )
        if not rule.message_patterns and not rule.path_patterns:
            raise ConfigurationError("specialization rule has no patterns", label=rule.label)
        for pattern in rule.message_patterns:
            try:
                _compile(pattern)
            except re.error as exc:
                raise ConfigurationError(
                    "invalid message pattern",
                    label=rule.label,
                    pattern=pattern,
                    error=str(exc),
                ) from exc


# ── Matching ────────────────────────────────────────────────────────────────


def _path_matches(path: str, pattern: str) -> bool:
    basename = path.rsplit("/", 1)[-1]
    return fnmatch.fnmatchcase(path, pattern) or fnmatch.fnmatchcase(basename, pattern)


def rule_matches(rule: SpecializationRule, commit: CommitRecord) -> bool:
    """True if *commit*'s message or any of its paths matches *rule*."""
    if any(_compile(p).search(commit.message) for p in rule.message_patterns):
        return True
    return any(
        _path_matches(path, pattern)
        for path in sorted(commit.changed_paths)
        for pattern in rule.path_patterns
    )


def detect_specializations(
    commits: Iterable[CommitRecord],
    rules: Sequence[SpecializationRule] = DEFAULT_SPECIALIZATION_RULES,
) -> tuple[str, ...]:
    """Ordered, deduplicated labels for one contributor's commits.

    Commits are scanned oldest to newest (stable for equal timestamps);
    within a commit labels follow table order.
    """
    labels: list[str] = []
    pending = list(rules)
    for commit in sorted(commits, key=lambda c: c.timestamp):
        if not pending:
            break
        still_pending = []
        for rule in pending:
            if rule_matches(rule, commit):
                labels.append(rule.label)
            else:
                still_pending.append(rule)
        pending = still_pending
    return tuple(labels)
