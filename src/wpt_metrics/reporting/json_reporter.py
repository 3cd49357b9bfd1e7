"""
JSON reporter for computed metrics.
"""

import json

from ..models import MetricsSummary
from .base import ReportGenerator


class JSONReporter(ReportGenerator):
    """Generate JSON format for dashboards and programmatic analysis."""

    def generate(self, summary: MetricsSummary) -> str:
        """Generate JSON report."""
        metadata = summary.metadata
        report = {
            "metadata": {
                "start_time": metadata.start_time.isoformat() if metadata.start_time else None,
                "end_time": metadata.end_time.isoformat() if metadata.end_time else None,
                "test_runs": [
                    {
                        "browser_name": r.product.browser_name,
                        "browser_version": r.product.browser_version,
                        "os_name": r.product.os_name,
                        "os_version": r.product.os_version,
                        "revision": r.revision,
                        "results_url": r.results_url,
                        "created_at": r.created_at.isoformat() if r.created_at else None,
                    }
                    for r in metadata.test_runs
                ],
            },
            "browser_count": summary.browser_count,
            "browsers": summary.browser_names,
            "policy": summary.policy,
            "totals": dict(sorted(summary.totals.items())),
            "pass_rates": dict(sorted(summary.pass_rates.items())),
            "failures": {
                browser: [{"test": t.test, "subtest": t.subtest} for t in test_ids]
                for browser, test_ids in sorted(summary.failures.items())
            },
        }

        return json.dumps(report, indent=2)
