"""Streamlit dashboard for Team X-Ray expertise analyses."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from team_xray.analyzer import assemble, find_experts_for_file, normalize_path
from team_xray.config import DEFAULT_TOP_N, PROCESSED_DIR, RAW_DIR
from team_xray.errors import TeamXRayError
from team_xray.models import ExpertiseAnalysis
from team_xray.snapshot import load_activity

_CATEGORY_COLORS = {
    "Risk": "#ef4444",
    "Opportunity": "#10b981",
    "Efficiency": "#3b82f6",
    "Growth": "#f59e0b",
}


# ── Data loading (cached) ──────────────────────────────────────────────────

@st.cache_data
def _load_latest_analysis() -> tuple[dict, dict] | None:
    """Load the most recent analysis JSON file. Returns (analysis, metadata)."""
    files = sorted(PROCESSED_DIR.glob("analysis_*.json"))
    if not files:
        return None
    data = json.loads(files[-1].read_text())
    return data.get("analysis", data), data.get("_metadata", {})


@st.cache_resource
def _reanalyse(raw_file_path: str) -> ExpertiseAnalysis | None:
    """Re-run the engine on the snapshot behind the saved analysis."""
    path = Path(raw_file_path)
    if not path.exists():
        path = RAW_DIR / path.name
    if not path.exists():
        return None
    try:
        return assemble(load_activity(path))
    except TeamXRayError:
        return None


def _experts_frame(analysis: dict) -> pd.DataFrame:
    rows = [
        {
            "Name": p["name"],
            "Email": p["email"],
            "Expertise %": p["expertise_percent"],
            "Commits": p["contributions"],
            "Last Commit": p["last_commit"][:10],
            "Specializations": ", ".join(p["specializations"]),
            "Role": p.get("team_role") or "",
            "Workload": p.get("workload_indicator") or "",
        }
        for p in analysis["expert_profiles"]
    ]
    df = pd.DataFrame(rows)
    df.index = df.index + 1
    return df


def _files_frame(analysis: dict) -> pd.DataFrame:
    rows = [
        {
            "File": f["file_name"],
            "Path": f["file_path"],
            "Experts": len(f["experts"]),
            "Primary Expert": f["experts"][0]["name"] if f["experts"] else "Unknown",
            "Touches": f["touch_count"],
            "Change Frequency": f["change_frequency"],
        }
        for f in analysis["file_expertise"]
    ]
    return pd.DataFrame(rows)


def _gauge(value: int, title: str, bad_high: bool) -> go.Figure:
    steps = [
        {"range": [0, 50], "color": "#fee2e2" if not bad_high else "#dcfce7"},
        {"range": [50, 100], "color": "#dcfce7" if not bad_high else "#fee2e2"},
    ]
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=value,
        title={"text": title},
        gauge={"axis": {"range": [0, 100]}, "bar": {"color": "#6366f1"}, "steps": steps},
    ))
    fig.update_layout(height=220, margin=dict(t=40, b=10, l=30, r=30))
    return fig


# ── Dashboard ───────────────────────────────────────────────────────────────

def main() -> None:
    """Render the Streamlit dashboard."""
    st.set_page_config(page_title="Team X-Ray", layout="wide")
    loaded = _load_latest_analysis()
    if loaded is None:
        st.error(
            "No analysis found. Run the pipeline first:\n\n"
            "```bash\n"
            "python scripts/analyze.py data/raw/activity_<repo>.json\n"
            "```"
        )
        return

    analysis, metadata = loaded
    profiles = analysis["expert_profiles"]

    # ── Header ───────────────────────────────────────────────────────────
    col_h1, col_h2 = st.columns([3, 2])
    with col_h1:
        st.markdown(f"## Team X-Ray · {analysis['repository']}")
        st.caption("Expertise · file ownership · team health")
    with col_h2:
        st.caption(
            f"{len(profiles)} experts · {analysis['total_files']} files · "
            f"{metadata.get('commit_count', '?')} commits · "
            f"computed {metadata.get('computed_at', 'unknown')[:10]}"
        )

    with st.sidebar:
        st.header("Filters")
        top_n = st.slider(
            "Top N experts",
            min_value=1,
            max_value=max(1, len(profiles)),
            value=min(DEFAULT_TOP_N, max(1, len(profiles))),
        )

    experts_df = _experts_frame(analysis).head(top_n)

    # ── Experts: table + chart ───────────────────────────────────────────
    col_table, col_chart = st.columns([3, 2])
    with col_table:
        st.markdown(f"**Top {len(experts_df)} Experts**")
        st.dataframe(experts_df, use_container_width=True)
    with col_chart:
        st.markdown("**Expertise relative to top contributor**")
        fig = go.Figure(go.Bar(
            x=experts_df["Name"],
            y=experts_df["Expertise %"],
            marker_color="#6366f1",
        ))
        fig.update_layout(
            yaxis=dict(range=[0, 100], title="Expertise %"),
            margin=dict(t=10, b=40, l=50, r=10),
            height=260,
        )
        st.plotly_chart(fig, use_container_width=True)

    # ── Team health ──────────────────────────────────────────────────────
    health = analysis["team_health_metrics"]
    kd = health["knowledge_distribution"]
    cm = health["collaboration_metrics"]
    col_risk, col_share, col_facts = st.columns(3)
    with col_risk:
        st.plotly_chart(
            _gauge(kd["risk_score"], "Knowledge concentration risk", bad_high=True),
            use_container_width=True,
        )
    with col_share:
        st.plotly_chart(
            _gauge(cm["knowledge_sharing"], "Knowledge sharing", bad_high=False),
            use_container_width=True,
        )
    with col_facts:
        st.metric("Bus factor", kd["bus_factor"])
        st.metric("Single-owner files", kd["silo_files"])
        st.metric("Shared files", cm["shared_files"])

    # ── Insights ─────────────────────────────────────────────────────────
    st.markdown("### Management Insights")
    for insight in analysis["management_insights"]:
        color = _CATEGORY_COLORS.get(insight["category"], "#64748b")
        with st.container(border=True):
            st.markdown(
                f"<span style='color:{color};font-weight:600'>{insight['category']}</span>"
                f" · {insight['priority']} priority · {insight['timeline']}",
                unsafe_allow_html=True,
            )
            st.markdown(f"**{insight['title']}**")
            st.write(insight["description"])
            st.markdown("\n".join(f"- {item}" for item in insight["action_items"]))
            st.caption(f"Expected impact: {insight['impact']}")

    # ── File ownership ───────────────────────────────────────────────────
    with st.expander("File Ownership"):
        st.dataframe(_files_frame(analysis), use_container_width=True)

    st.markdown("### Who owns this file?")
    query = st.text_input("Repository-relative path", placeholder="src/auth/login.ts")
    if query:
        live = _reanalyse(metadata.get("raw_file", ""))
        if live is not None:
            experts = [
                {"name": e.name, "identity": e.identity, "score": e.score, "touches": e.touches}
                for e in find_experts_for_file(live, query)
            ]
        else:
            wanted = normalize_path(query)
            experts = next(
                (f["experts"] for f in analysis["file_expertise"] if f["file_path"] == wanted),
                [],
            )
        if experts:
            st.dataframe(pd.DataFrame(experts), use_container_width=True)
        else:
            st.info(f"No experts found for {query}")


if __name__ == "__main__":
    main()
