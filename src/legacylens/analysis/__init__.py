from .blast_radius import BlastRadiusAnalyzer

__all__ = ["BlastRadiusAnalyzer"]
