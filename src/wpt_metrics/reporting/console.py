"""
Console reporter for computed metrics.
"""

import os
import sys

from ..models import MetricsSummary, TestID
from .base import ReportGenerator


def _supports_color() -> bool:
    """Return True if the output stream likely supports ANSI colours."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
        return False
    return sys.platform != "win32"


def _format_test_id(test_id: TestID) -> str:
    if test_id.is_top_level:
        return test_id.test
    return f"{test_id.test} > {test_id.subtest}"


class ConsoleReporter(ReportGenerator):
    """Generate colored console output for computed metrics."""

    def __init__(self, max_rows: int = 20) -> None:
        self.max_rows = max_rows
        color = _supports_color()
        self.GREEN = "\033[92m" if color else ""
        self.RED = "\033[91m" if color else ""
        self.YELLOW = "\033[93m" if color else ""
        self.RESET = "\033[0m" if color else ""
        self.BOLD = "\033[1m" if color else ""

    def generate(self, summary: MetricsSummary) -> str:
        """Generate console report."""
        lines = []

        lines.append(f"\n{self.BOLD}WPT Metrics{self.RESET}")
        lines.append("=" * 60)

        metadata = summary.metadata
        lines.append(f"\n{self.BOLD}Runs:{self.RESET}")
        for run in metadata.test_runs:
            product = run.product
            lines.append(
                f"  {product.browser_name} {product.browser_version} "
                f"({product.os_name} {product.os_version}) @ {run.revision or '-'}"
            )
        if metadata.start_time is not None:
            lines.append(f"  From: {metadata.start_time.isoformat()}")
            lines.append(f"  To:   {metadata.end_time.isoformat()}")
        lines.append(f"  Browsers: {summary.browser_count}")
        lines.append(f"  Policy: {summary.policy}")

        lines.append(f"\n{self.BOLD}Totals:{self.RESET}")
        lines.append(f"  Tests: {len(summary.pass_rates)}")
        lines.append(f"  Leaf units: {summary.total_units}")
        top_level = sorted(summary.top_level_totals().items())
        for prefix, count in top_level[: self.max_rows]:
            lines.append(f"  {prefix}: {count}")
        if len(top_level) > self.max_rows:
            lines.append(f"  ... {len(top_level) - self.max_rows} more")

        lines.append(f"\n{self.BOLD}Pass rates:{self.RESET}")
        aggregate = summary.aggregate_pass_rates()
        for k, count in enumerate(aggregate):
            if k == summary.browser_count and k > 0:
                color = self.GREEN
            elif k == 0:
                color = self.RED
            else:
                color = self.YELLOW
            lines.append(f"  {color}{k}/{summary.browser_count} passing: {count}{self.RESET}")

        if summary.failures:
            lines.append(f"\n{self.BOLD}Browser-specific failures:{self.RESET}")
            for browser in sorted(summary.failures):
                failures = summary.failures[browser]
                lines.append(f"\n  {self.RED}{browser}: {len(failures)}{self.RESET}")
                for test_id in failures[: self.max_rows]:
                    lines.append(f"    ✗ {_format_test_id(test_id)}")
                if len(failures) > self.max_rows:
                    lines.append(f"    ... {len(failures) - self.max_rows} more")

        lines.append("")
        return "\n".join(lines)
