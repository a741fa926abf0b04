"""
CLI entry point using Typer.

Provides commands for the coaching engine:
- scenarios: List bundled simulation scenarios
- simulate: Run a scenario and show weekly decisions
- sessions: Preview a week's sessions for a program
"""

from .app import app
from .commands import sessions as _sessions  # noqa: F401  registers commands
from .commands import simulate as _simulate  # noqa: F401  registers commands


def main() -> None:
    app()


if __name__ == "__main__":
    main()
