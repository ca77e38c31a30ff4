"""Team X-Ray: who knows what in a codebase, from its commit history."""

from team_xray.analyzer import AnalysisOptions, assemble, find_experts_for_file
from team_xray.errors import (
    ConfigurationError,
    EmptyActivityError,
    MalformedActivityError,
    SnapshotFormatError,
    TeamXRayError,
)

__version__ = "0.1.0"

__all__ = [
    "AnalysisOptions",
    "ConfigurationError",
    "EmptyActivityError",
    "MalformedActivityError",
    "SnapshotFormatError",
    "TeamXRayError",
    "assemble",
    "find_experts_for_file",
    "__version__",
]
