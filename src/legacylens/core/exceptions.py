"""
Exception hierarchy for LegacyLens.

Malformed graph input never raises: normalization repairs it. The errors
below cover the boundaries that cannot be repaired locally, mainly the
analysis service.
"""

from typing import Optional


class LegacyLensError(Exception):
    """Base class for all LegacyLens errors."""


class ConfigError(LegacyLensError):
    """The settings file could not be read or validated."""


class SnapshotNotFoundError(LegacyLensError):
    def __init__(self, path: str):
        super().__init__(f"Snapshot not found: {path}")
        self.path = path


class NodeNotFoundError(LegacyLensError):
    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class BundleError(LegacyLensError):
    """The source archive or directory could not be bundled."""


class AnalysisError(LegacyLensError):
    """
    The analysis service did not produce a usable result.

    Every subclass is retry-able from the user's point of view and never
    touches the last applied snapshot.
    """

    kind = "failed"
    retryable = True


class AnalysisTimeoutError(AnalysisError):
    kind = "timeout"


class AnalysisRejectedError(AnalysisError):
    """The service answered with an error status or could not be reached."""

    kind = "rejected"

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class PayloadTooLargeError(AnalysisRejectedError):
    def __init__(self, message: str = "Payload too large"):
        super().__init__(message, status=413)


class MalformedResponseError(AnalysisError):
    kind = "malformed"


class RequestCancelledError(AnalysisError):
    """The request was cancelled or superseded before its result applied."""

    kind = "cancelled"
