"""Entry-point for ``python -m team_xray``."""

from __future__ import annotations

import sys

from team_xray import __version__


def main() -> None:
    """Print a short help message and exit."""
    print(
        f"team_xray v{__version__}\n"
        "\n"
        "Team X-Ray: expertise, ownership and team health from commit history\n"
        "\n"
        "Usage:\n"
        "  python -m team_xray                      Show this help message\n"
        "  python scripts/analyze.py [SNAPSHOT]     Analyse an activity snapshot\n"
        "  streamlit run app/streamlit_app.py       Launch the dashboard\n"
    )
    sys.exit(0)


if __name__ == "__main__":
    main()
