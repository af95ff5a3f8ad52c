"""CLI command groups for PMGraph."""
