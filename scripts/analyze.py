"""CLI: Build an expertise analysis from an activity snapshot."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from team_xray.analyzer import assemble
from team_xray.config import PROCESSED_DIR, RAW_DIR
from team_xray.enrichment import CommitPatternNarrator, enrich_analysis
from team_xray.errors import TeamXRayError
from team_xray.snapshot import activity_fingerprint, enriched_to_dict, load_activity

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s"
)
logger = logging.getLogger(__name__)


def _latest_raw_file() -> Path | None:
    """Return the most recent activity snapshot."""
    files = sorted(RAW_DIR.glob("activity_*.json"))
    return files[-1] if files else None


def main(argv: list[str] | None = None) -> int:
    """Load a snapshot, analyse it, and save to processed/."""
    argv = sys.argv[1:] if argv is None else argv
    raw_file = Path(argv[0]) if argv else _latest_raw_file()
    if raw_file is None:
        print(f"No activity snapshot found in {RAW_DIR}. Pass a path explicitly.")
        return 1

    logger.info("Loading activity from %s", raw_file)
    try:
        activity = load_activity(raw_file)
        analysis = assemble(activity)
    except TeamXRayError as exc:
        logger.error("Analysis failed: %s", exc)
        return 2

    enriched = enrich_analysis(analysis, activity, CommitPatternNarrator())
    logger.info(
        "Analysed %d contributors across %d files",
        len(analysis.expert_profiles),
        analysis.total_files,
    )

    PROCESSED_DIR.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    out_path = PROCESSED_DIR / f"analysis_{timestamp}.json"

    serialized = {
        "_metadata": {
            "raw_file": str(raw_file),
            "computed_at": datetime.now(timezone.utc).isoformat(),
            "fingerprint": activity_fingerprint(activity),
            "commit_count": len(activity.commits),
            "contributor_count": len(activity.contributors),
        },
        "analysis": enriched_to_dict(enriched),
    }
    out_path.write_text(json.dumps(serialized, indent=2))
    logger.info("Saved analysis → %s", out_path)

    health = analysis.team_health_metrics
    print(
        f"\n{analysis.repository}: risk={health.knowledge_distribution.risk_score} "
        f"sharing={health.collaboration_metrics.knowledge_sharing}\n"
    )
    for i, p in enumerate(analysis.expert_profiles[:10], 1):
        print(
            f"  {i:2d}. {p.name:<25s}  Expertise={p.expertise_percent:3d}%  "
            f"Commits={p.contributions:<5d}  {', '.join(p.specializations)}"
        )
    print()
    for insight in analysis.management_insights:
        print(f"  [{insight.category.value}/{insight.priority.value}] {insight.title}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
