"""Domain layer for PMGraph.

Pure models and algorithms: no I/O, no side effects.
"""
