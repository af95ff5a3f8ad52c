"""Outer interfaces over the graph store: HTTP API and CLI."""
