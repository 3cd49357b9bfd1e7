"""
Pass/fail classification policies for pass-rate metrics.
"""

from typing import Callable, Dict

from .models import CompleteTestStatus, SubTestStatus, TestStatus

Classifier = Callable[[CompleteTestStatus], bool]


def _sub_status_passes(status: CompleteTestStatus) -> bool:
    return status.sub_status in (SubTestStatus.STATUS_UNKNOWN, SubTestStatus.PASS)


def ok_and_unknown_or_passes(status: CompleteTestStatus) -> bool:
    """Strict policy: the harness must report OK, subtests must pass."""
    return status.status == TestStatus.OK and _sub_status_passes(status)


def ok_or_passes_and_unknown_or_passes(status: CompleteTestStatus) -> bool:
    """Lenient policy: a top-level PASS counts the same as OK."""
    return status.status in (TestStatus.OK, TestStatus.PASS) and _sub_status_passes(status)


CLASSIFIERS: Dict[str, Classifier] = {
    "strict": ok_and_unknown_or_passes,
    "lenient": ok_or_passes_and_unknown_or_passes,
}


def get_classifier(name: str) -> Classifier:
    """
    Look up a classification policy by name.

    Raises:
        ValueError: If no policy is registered under ``name``
    """
    try:
        return CLASSIFIERS[name]
    except KeyError:
        raise ValueError(
            f"Policy '{name}' not found. Available policies: {', '.join(sorted(CLASSIFIERS))}"
        )
