"""
Pipeline runner chaining the metrics computations.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .cancellation import CancelToken
from .classifiers import get_classifier
from .compute import (
    compute_browser_failure_list,
    compute_pass_rate_metric,
    compute_totals,
    gather_results_by_id,
)
from .config import MetricsConfig
from .models import MetricsSummary, TestID, TestRun, TestRunResults, TestRunsMetadata

logger = logging.getLogger(__name__)


class MetricsRunner:
    """Computes all metrics for one snapshot of test run results."""

    def __init__(self, config: MetricsConfig, cancel_token: Optional[CancelToken] = None):
        self.config = config
        self.cancel_token = cancel_token or CancelToken(config.timeout_seconds)

    def _check(self, stage: str) -> None:
        self.cancel_token.raise_if_cancelled(stage)

    @staticmethod
    def _distinct_runs(results: Sequence[TestRunResults]) -> List[TestRun]:
        runs: Dict[TestRun, None] = {}
        for record in results:
            runs.setdefault(record.run, None)
        return list(runs)

    def run(self, results: Sequence[TestRunResults]) -> MetricsSummary:
        """
        Run the full pipeline over ``results``.

        Args:
            results: Test results from one or more runs

        Returns:
            MetricsSummary with every computed table

        Raises:
            ComputationCancelled: If the cancel token fires at any stage
            ValueError: If the configured pass policy is unknown
        """
        classify = get_classifier(self.config.pass_policy)
        runs = self._distinct_runs(results)
        browser_names = sorted({run.browser_name for run in runs})
        browser_count = self.config.browser_count
        if browser_count is None:
            browser_count = len(browser_names)

        logger.info(
            "Computing metrics for %d results from %d runs (%d browsers, policy=%s)",
            len(results),
            len(runs),
            browser_count,
            self.config.pass_policy,
        )

        statusz = gather_results_by_id(results, self.cancel_token)

        self._check("compute_totals")
        totals = compute_totals(statusz)

        self._check("compute_pass_rate_metric")
        pass_rates = compute_pass_rate_metric(browser_count, statusz, classify)

        failures: Dict[str, List[TestID]] = {}
        if self.config.compute_failures:
            for browser in self.config.failure_browsers or browser_names:
                self._check("compute_browser_failure_list")
                failures[browser] = compute_browser_failure_list(
                    browser_count, browser, statusz, classify
                )
                logger.debug("%d entries fail only in %s", len(failures[browser]), browser)

        return MetricsSummary(
            metadata=TestRunsMetadata.from_runs(runs),
            browser_names=browser_names,
            browser_count=browser_count,
            policy=self.config.pass_policy,
            totals=totals,
            pass_rates=pass_rates,
            failures=failures,
        )
