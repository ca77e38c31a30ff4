"""Centralised configuration and constants."""

from __future__ import annotations

import os
from pathlib import Path

# ── Paths ───────────────────────────────────────────────────────────────────
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
DATA_DIR: Path = Path(os.getenv("TEAMXRAY_DATA_DIR", str(PROJECT_ROOT / "data")))
RAW_DIR: Path = DATA_DIR / "raw"
PROCESSED_DIR: Path = DATA_DIR / "processed"

# ── Insight thresholds ─────────────────────────────────────────────────────
RISK_SCORE_THRESHOLD: int = 70
KNOWLEDGE_SHARING_THRESHOLD: int = 50
SILO_RATIO_THRESHOLD: float = 0.5  # share of files with a single contributor
WORKLOAD_RATIO_THRESHOLD: float = 3.0  # top contributions / median contributions
GROWTH_EXPERTISE_THRESHOLD: int = 20  # expertise percent below which mentoring helps
MIN_TEAM_SIZE_FOR_BALANCE: int = 3

# ── Team health ────────────────────────────────────────────────────────────
BUS_FACTOR_COVERAGE: float = 0.5

# Case-insensitive regular expressions; a commit message matching any of
# them counts as a collaborative commit.
COLLABORATION_PATTERNS: tuple[str, ...] = (
    r"\breview",
    r"\bpair(ed|ing)?\b",
    r"\bmerge",
    r"\bthank",
    r"\bhelp(ed|ing|s)?\b",
    r"\bmentor",
    r"co-authored-by",
    r"\bcollaborat",
)

# ── File ownership ─────────────────────────────────────────────────────────
# Mid-rank percentile cut points: below the first is "low", below the
# second is "medium", anything else is "high".
CHANGE_FREQUENCY_CUTS: tuple[float, float] = (1 / 3, 2 / 3)
FILE_SCORE_DECIMALS: int = 2

# ── Dashboard defaults ─────────────────────────────────────────────────────
DEFAULT_TOP_N: int = 10
