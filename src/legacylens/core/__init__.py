"""
Core modules for LegacyLens.

This package contains the fundamental building blocks:
- types: Data structures (Node, Edge, Graph, Position)
- graph: Normalization of raw analysis payloads into a Graph
- index: Forward and reverse dependency lookups
- selection: Focused-node state machine
- viewport: Camera fitting for the laid-out drawing
- pipeline: Request tokens and atomic snapshot replacement
"""
