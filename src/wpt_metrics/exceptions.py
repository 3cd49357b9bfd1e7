"""
Custom exceptions for WPT metrics computation.
"""

from typing import Any, Optional


class MetricsError(Exception):
    """Base exception for WPT metrics errors."""

    pass


class ComputationCancelled(MetricsError):
    """Raised when a computation is aborted through its cancel token.

    The partially built table is attached so callers can inspect it, but it
    must never be treated as a complete result. ``processed`` is None for
    cancellations detected between stages rather than inside a traversal.
    """

    def __init__(
        self, stage: str, reason: str, partial: Any = None, processed: Optional[int] = None
    ):
        self.stage = stage
        self.reason = reason
        self.partial = partial
        self.processed = processed
        if processed is None:
            message = f"{stage} cancelled: {reason}"
        else:
            message = f"{stage} cancelled after {processed} records: {reason}"
        super().__init__(message)


class ReportLoadError(MetricsError):
    """Raised when a results report cannot be read or is malformed."""

    def __init__(self, path: str, message: str, original_error: Optional[Exception] = None):
        self.path = path
        self.message = message
        self.original_error = original_error
        super().__init__(f"Failed to load report {path}: {message}")
