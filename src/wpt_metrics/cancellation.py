"""
Cooperative cancellation for long-running aggregations.
"""

import threading
import time
from typing import Optional

from .exceptions import ComputationCancelled


class CancelToken:
    """
    Cancellation signal shared between a computation and its caller.

    The token is cancelled either explicitly via :meth:`cancel` (safe to call
    from another thread) or implicitly once ``timeout_seconds`` have elapsed
    since it was created.
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason = ""
        self._deadline: Optional[float] = None
        if timeout_seconds is not None:
            self._deadline = time.monotonic() + timeout_seconds

    def cancel(self, reason: str = "cancelled by caller") -> None:
        """Request cancellation. Only the first reason is kept."""
        with self._lock:
            if not self._event.is_set():
                self._reason = reason
                self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    @property
    def reason(self) -> str:
        return self._reason

    def raise_if_cancelled(
        self, stage: str, partial=None, processed: Optional[int] = None
    ) -> None:
        """
        Raise ComputationCancelled if the token has been cancelled.

        Args:
            stage: Name of the computation being checked
            partial: Partially built result to attach to the exception
            processed: Number of records processed so far, when checked
                inside a traversal

        Raises:
            ComputationCancelled: If cancellation was requested
        """
        if self.cancelled:
            raise ComputationCancelled(stage, self._reason, partial=partial, processed=processed)
