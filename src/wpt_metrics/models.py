"""
Data models for WPT metrics computation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class TestStatus(Enum):
    """Status of a top-level test."""

    UNKNOWN = 0
    OK = 1
    ERROR = 2
    TIMEOUT = 3
    PASS = 4
    FAIL = 5
    CRASH = 6
    SKIP = 7
    PRECONDITION_FAILED = 8
    ASSERT = 9

    @classmethod
    def from_string(cls, value: Optional[str]) -> "TestStatus":
        """Parse a status string, returning UNKNOWN for anything unrecognized."""
        if not value:
            return cls.UNKNOWN
        return _TEST_STATUS_LOOKUP.get(value.strip().upper(), cls.UNKNOWN)


class SubTestStatus(Enum):
    """Status of a subtest."""

    STATUS_UNKNOWN = 0
    PASS = 1
    FAIL = 2
    TIMEOUT = 3
    NOT_RUN = 4
    PRECONDITION_FAILED = 5
    SKIP = 6
    ASSERT = 7

    @classmethod
    def from_string(cls, value: Optional[str]) -> "SubTestStatus":
        """Parse a subtest status string, returning STATUS_UNKNOWN for anything unrecognized."""
        if not value:
            return cls.STATUS_UNKNOWN
        return _SUB_TEST_STATUS_LOOKUP.get(value.strip().upper(), cls.STATUS_UNKNOWN)


_TEST_STATUS_LOOKUP: Dict[str, TestStatus] = {s.name: s for s in TestStatus}

_SUB_TEST_STATUS_LOOKUP: Dict[str, SubTestStatus] = {s.name: s for s in SubTestStatus}
# wptreport spells it without the underscore
_SUB_TEST_STATUS_LOOKUP["NOTRUN"] = SubTestStatus.NOT_RUN


@dataclass(frozen=True, order=True)
class TestID:
    """Identity of a test or subtest.

    An empty ``subtest`` denotes the top-level test itself.
    """

    test: str
    subtest: str = ""

    @property
    def is_top_level(self) -> bool:
        return self.subtest == ""


@dataclass(frozen=True)
class CompleteTestStatus:
    """Top-level status paired with a subtest status.

    For top-level entries ``sub_status`` is always STATUS_UNKNOWN. For
    subtest entries ``status`` is the parent test's status.
    """

    status: TestStatus
    sub_status: SubTestStatus = SubTestStatus.STATUS_UNKNOWN


@dataclass(frozen=True)
class Product:
    """Browser and platform a run was executed on."""

    browser_name: str
    browser_version: str = ""
    os_name: str = ""
    os_version: str = ""


@dataclass(frozen=True)
class TestRun:
    """Metadata identifying a single test run."""

    product: Product
    revision: str = ""
    results_url: str = ""
    created_at: Optional[datetime] = None

    @property
    def browser_name(self) -> str:
        return self.product.browser_name


@dataclass(frozen=True)
class SubTest:
    """Raw result of one subtest."""

    name: str
    status: str
    message: Optional[str] = None


@dataclass(frozen=True)
class TestResults:
    """Raw result of one top-level test and its subtests."""

    test: str
    status: str
    title: Optional[str] = None
    subtests: Tuple[SubTest, ...] = ()


@dataclass(frozen=True)
class TestRunResults:
    """A test result together with the run that produced it."""

    run: TestRun
    result: TestResults


StatusTable = Dict[TestID, Dict[str, CompleteTestStatus]]
TotalsTable = Dict[str, int]
PassRateTable = Dict[str, List[int]]


@dataclass
class TestRunsMetadata:
    """Time span and runs an aggregate was computed from."""

    start_time: Optional[datetime]
    end_time: Optional[datetime]
    test_runs: List[TestRun] = field(default_factory=list)

    @classmethod
    def from_runs(cls, runs: Sequence[TestRun]) -> "TestRunsMetadata":
        times = [r.created_at for r in runs if r.created_at is not None]
        return cls(
            start_time=min(times) if times else None,
            end_time=max(times) if times else None,
            test_runs=list(runs),
        )


@dataclass
class MetricsSummary:
    """Aggregates computed for one set of test runs."""

    metadata: TestRunsMetadata
    browser_names: List[str]
    browser_count: int
    policy: str
    totals: TotalsTable
    pass_rates: PassRateTable
    failures: Dict[str, List[TestID]] = field(default_factory=dict)

    @property
    def total_units(self) -> int:
        """Number of leaf units across all tests."""
        return sum(sum(histogram) for histogram in self.pass_rates.values())

    def aggregate_pass_rates(self) -> List[int]:
        """Sum the per-test histograms into a single histogram."""
        aggregate = [0] * (self.browser_count + 1)
        for histogram in self.pass_rates.values():
            for k, count in enumerate(histogram):
                aggregate[k] += count
        return aggregate

    def top_level_totals(self) -> Dict[str, int]:
        """Totals for root-level path prefixes only."""
        return {
            prefix: count
            for prefix, count in self.totals.items()
            if "/" not in prefix.lstrip("/") and prefix != ""
        }
