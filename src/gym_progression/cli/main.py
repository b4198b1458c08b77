"""
CLI entry point using Typer.

Provides commands for progression management:
- init: Create the program file
- switch / policy: Program-wide switch and default policy
- enable / disable / override / reset: Per-exercise configuration
- log-session: Log a completed exercise and get the next target
- status / show-state: Display progression state
"""

from .app import app
from .commands import program, sessions, status  # noqa: F401  (register commands)

__all__ = ["app"]


if __name__ == "__main__":
    app()
