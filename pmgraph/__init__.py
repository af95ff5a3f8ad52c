"""PMGraph - node-graph task board state engine."""

__version__ = "0.1.0"
