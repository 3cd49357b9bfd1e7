"""
Aggregation of raw test run results into metrics tables.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from .cancellation import CancelToken
from .classifiers import Classifier
from .models import (
    CompleteTestStatus,
    PassRateTable,
    StatusTable,
    SubTestStatus,
    TestID,
    TestRunResults,
    TestStatus,
    TotalsTable,
)

logger = logging.getLogger(__name__)


def gather_results_by_id(
    results: Iterable[TestRunResults], cancel_token: Optional[CancelToken] = None
) -> StatusTable:
    """
    Collapse per-run test results into a table keyed by test and browser.

    Every top-level result is recorded under ``TestID(test, "")`` and every
    subtest under ``TestID(test, subtest)``; subtest entries carry the
    parent's top-level status. When the same browser reports the same
    TestID more than once, the later record wins.

    Args:
        results: Test results in iteration order
        cancel_token: Optional token polled once per record

    Returns:
        Mapping of TestID to a mapping of browser name to CompleteTestStatus

    Raises:
        ComputationCancelled: If the token is cancelled before all records
            are processed; the exception carries the partial table
    """
    statusz: StatusTable = {}
    processed = 0

    for record in results:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(
                "gather_results_by_id", partial=statusz, processed=processed
            )

        browser = record.run.browser_name
        result = record.result
        top_status = TestStatus.from_string(result.status)

        _record(statusz, TestID(result.test, ""), browser, CompleteTestStatus(top_status))
        for subtest in result.subtests:
            _record(
                statusz,
                TestID(result.test, subtest.name),
                browser,
                CompleteTestStatus(top_status, SubTestStatus.from_string(subtest.status)),
            )
        processed += 1

    logger.info("Gathered %d test IDs from %d results", len(statusz), processed)
    return statusz


def _record(
    statusz: StatusTable, test_id: TestID, browser: str, status: CompleteTestStatus
) -> None:
    by_browser = statusz.setdefault(test_id, {})
    if browser in by_browser:
        logger.debug(
            "Duplicate result for %s in %s; replacing %s with %s",
            test_id,
            browser,
            by_browser[browser],
            status,
        )
    by_browser[browser] = status


def compute_totals(statusz: StatusTable) -> TotalsTable:
    """
    Count leaf test units under every path prefix of every test name.

    A test with N distinct subtests contributes N + 1 units (the test itself
    plus each subtest) to each of its ``/``-delimited prefixes, including
    its full name.

    Args:
        statusz: Table produced by gather_results_by_id

    Returns:
        Mapping of path prefix to leaf unit count
    """
    subtests_by_test: Dict[str, Set[str]] = defaultdict(set)
    for test_id in statusz:
        names = subtests_by_test[test_id.test]
        if test_id.subtest:
            names.add(test_id.subtest)

    totals: TotalsTable = defaultdict(int)
    for test, subtests in subtests_by_test.items():
        units = 1 + len(subtests)
        pieces = test.split("/")
        for i in range(1, len(pieces) + 1):
            totals["/".join(pieces[:i])] += units

    return dict(totals)


def compute_pass_rate_metric(
    browser_count: int, statusz: StatusTable, classify: Classifier
) -> PassRateTable:
    """
    Build per-test histograms of how many browsers pass each entry.

    For each TestID, ``k`` is the number of browsers whose status satisfies
    ``classify``; ``table[test][k]`` is incremented once for that entry.
    Browsers with no recorded status count as not passing. Counts beyond
    ``browser_count`` land in the last bucket.

    Args:
        browser_count: Size of the agreed browser set; histograms have
            ``browser_count + 1`` buckets
        statusz: Table produced by gather_results_by_id
        classify: Predicate deciding whether a status passes

    Returns:
        Mapping of test name to histogram
    """
    pass_rates: PassRateTable = {}
    for test_id, by_browser in statusz.items():
        passing = sum(1 for status in by_browser.values() if classify(status))
        if passing > browser_count:
            passing = browser_count
        histogram = pass_rates.get(test_id.test)
        if histogram is None:
            histogram = pass_rates[test_id.test] = [0] * (browser_count + 1)
        histogram[passing] += 1
    return pass_rates


def compute_browser_failure_list(
    browser_count: int, browser_name: str, statusz: StatusTable, classify: Classifier
) -> List[TestID]:
    """
    List entries that fail only in the given browser.

    An entry qualifies when ``browser_name`` reported a status that does
    not satisfy ``classify`` and every one of the other
    ``browser_count - 1`` browsers passes.

    Returns:
        Sorted list of TestIDs
    """
    failures = []
    for test_id, by_browser in statusz.items():
        status = by_browser.get(browser_name)
        if status is None or classify(status):
            continue
        others_passing = sum(
            1
            for browser, other in by_browser.items()
            if browser != browser_name and classify(other)
        )
        if others_passing == browser_count - 1:
            failures.append(test_id)
    failures.sort()
    return failures
