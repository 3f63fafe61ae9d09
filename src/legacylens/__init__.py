"""
LegacyLens: dependency maps for legacy codebases.

Turns the node/edge payload produced by the analysis service into a
normalized graph snapshot, lays it out in ranks, and serves dependency
queries for interactive exploration.
"""

__version__ = "0.1.0"
