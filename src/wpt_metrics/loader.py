"""
Loading of wptreport JSON files into test run results.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .exceptions import ReportLoadError
from .models import Product, SubTest, TestResults, TestRun, TestRunResults

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def run_from_report(report: Dict[str, Any], path: PathLike) -> TestRun:
    """
    Build run metadata from a report's ``run_info`` block.

    Args:
        report: Parsed report document
        path: Report location, kept as the run's results_url

    Returns:
        TestRun describing the report

    Raises:
        ReportLoadError: If no browser name can be determined
    """
    run_info = report.get("run_info") or {}
    if not isinstance(run_info, dict):
        raise ReportLoadError(str(path), "run_info must be an object")

    browser_name = run_info.get("browser_name") or run_info.get("product")
    if not browser_name:
        raise ReportLoadError(str(path), "run_info has no browser_name or product")

    created_at = None
    time_start = report.get("time_start")
    if isinstance(time_start, (int, float)) and not isinstance(time_start, bool):
        try:
            created_at = datetime.fromtimestamp(time_start / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ReportLoadError(str(path), "time_start out of range", e)

    return TestRun(
        product=Product(
            browser_name=str(browser_name),
            browser_version=str(run_info.get("browser_version") or ""),
            os_name=str(run_info.get("os") or ""),
            os_version=str(run_info.get("os_version") or ""),
        ),
        revision=str(run_info.get("revision") or ""),
        results_url=str(path),
        created_at=created_at,
    )


def _optional_string(value: Any, location: str, path: PathLike) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ReportLoadError(str(path), f"{location} must be a string")
    return value


def _parse_result(entry: Any, index: int, path: PathLike) -> TestResults:
    if not isinstance(entry, dict):
        raise ReportLoadError(str(path), f"results[{index}] must be an object")
    test = entry.get("test")
    if not test:
        raise ReportLoadError(str(path), f"results[{index}] is missing test")
    if not isinstance(test, str):
        raise ReportLoadError(str(path), f"results[{index}].test must be a string")
    status = _optional_string(entry.get("status"), f"results[{index}].status", path)

    subtests = []
    for j, sub in enumerate(entry.get("subtests") or []):
        location = f"results[{index}].subtests[{j}]"
        if not isinstance(sub, dict) or not sub.get("name"):
            raise ReportLoadError(str(path), f"{location} is missing name")
        if not isinstance(sub["name"], str):
            raise ReportLoadError(str(path), f"{location}.name must be a string")
        subtests.append(
            SubTest(
                name=sub["name"],
                status=_optional_string(sub.get("status"), f"{location}.status", path),
                message=sub.get("message"),
            )
        )

    return TestResults(
        test=test,
        status=status,
        title=entry.get("title"),
        subtests=tuple(subtests),
    )


def load_report(path: PathLike, run: Optional[TestRun] = None) -> List[TestRunResults]:
    """
    Load a single wptreport JSON file.

    Args:
        path: Path to the report
        run: Run metadata to use instead of the report's ``run_info``

    Returns:
        List of TestRunResults in report order

    Raises:
        ReportLoadError: If the file cannot be read or is malformed
    """
    logger.info("Loading report from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            report = json.load(f)
    except json.JSONDecodeError as e:
        raise ReportLoadError(str(path), f"invalid JSON: {e}", e)
    except UnicodeDecodeError as e:
        raise ReportLoadError(str(path), f"invalid UTF-8: {e}", e)
    except FileNotFoundError as e:
        raise ReportLoadError(str(path), "file not found", e)
    except OSError as e:
        raise ReportLoadError(str(path), f"unable to read file: {e}", e)

    if not isinstance(report, dict):
        raise ReportLoadError(str(path), "report must be a JSON object")
    entries = report.get("results")
    if not isinstance(entries, list):
        raise ReportLoadError(str(path), "report has no results list")

    if run is None:
        run = run_from_report(report, path)

    results = [
        TestRunResults(run=run, result=_parse_result(entry, i, path))
        for i, entry in enumerate(entries)
    ]
    logger.debug("Loaded %d results for %s from %s", len(results), run.browser_name, path)
    return results


def load_reports(paths: Sequence[PathLike]) -> List[TestRunResults]:
    """Load and concatenate several reports, preserving file order."""
    all_results: List[TestRunResults] = []
    for path in paths:
        all_results.extend(load_report(path))
    return all_results
