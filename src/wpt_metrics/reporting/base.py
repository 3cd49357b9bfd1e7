"""
Base class for report generators.
"""

from abc import ABC, abstractmethod

from ..models import MetricsSummary


class ReportGenerator(ABC):
    """Base class for generating metrics reports."""

    @abstractmethod
    def generate(self, summary: MetricsSummary) -> str:
        """
        Generate a report from computed metrics.

        Args:
            summary: MetricsSummary with computed tables

        Returns:
            Report as a string
        """
        pass
