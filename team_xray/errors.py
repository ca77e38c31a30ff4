"""Exception hierarchy for Team X-Ray."""

from __future__ import annotations


class TeamXRayError(Exception):
    """Base exception for all Team X-Ray errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class EmptyActivityError(TeamXRayError):
    """Raised when the activity snapshot has no contributors."""

    def __init__(self, repository_id: str) -> None:
        super().__init__(
            "No contributors in activity snapshot",
            details={"repository": repository_id},
        )
        self.repository_id = repository_id


class MalformedActivityError(TeamXRayError):
    """Raised when a structural invariant of the snapshot is violated."""

    def __init__(self, reason: str, **details: str) -> None:
        super().__init__(f"Malformed activity: {reason}", details=details)
        self.reason = reason


class ConfigurationError(TeamXRayError):
    """Raised for an invalid specialization or insight rule table."""

    def __init__(self, reason: str, **details: str) -> None:
        super().__init__(f"Invalid configuration: {reason}", details=details)
        self.reason = reason


class SnapshotFormatError(TeamXRayError):
    """Raised when a JSON activity snapshot cannot be read."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(
            f"Cannot read activity snapshot: {source}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason
