"""
CLI entry point using Typer.

Commands:
- summary / prs / leaderboard / compliance: workout analytics for a period
- strength-trend / one-rm: estimated one-rep max
- bodyweight: body-weight change
- swap / nutrition / log-food: nutrition tools
- migrate-draft / clear-draft: cached workout drafts
"""

# Import command modules to register their @app.command() decorators
from .commands import analysis, drafts, nutrition  # noqa: F401
from .app import app


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
