"""Entry point for the PMGraph CLI.

Usage:
    python -m pmgraph.interfaces.cli.main

Or via installed entry point:
    pmgraph <command>
"""

from pmgraph.interfaces.cli import app


def main() -> None:
    """Run the PMGraph CLI application."""
    app()


if __name__ == "__main__":
    main()
