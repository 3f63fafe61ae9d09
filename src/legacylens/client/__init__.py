from .analysis import AnalysisClient, AnalysisResponse, parse_response

__all__ = ["AnalysisClient", "AnalysisResponse", "parse_response"]
