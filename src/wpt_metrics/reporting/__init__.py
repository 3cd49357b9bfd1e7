"""
Reporting modules for WPT metrics.
"""

from .base import ReportGenerator
from .console import ConsoleReporter
from .json_reporter import JSONReporter

__all__ = ["ReportGenerator", "ConsoleReporter", "JSONReporter"]
