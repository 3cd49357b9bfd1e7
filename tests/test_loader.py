"""Tests for wptreport loading."""

import json
from datetime import datetime, timezone

import pytest

from wpt_metrics.compute import compute_totals, gather_results_by_id
from wpt_metrics.exceptions import ReportLoadError
from wpt_metrics.loader import load_report, load_reports, run_from_report
from wpt_metrics.models import Product, SubTest, TestRun


def _report(browser="chrome", results=None, **extra):
    report = {
        "run_info": {
            "product": browser,
            "browser_version": "120.0",
            "os": "linux",
            "os_version": "22.04",
            "revision": "abc123",
        },
        "time_start": 1600000000000,
        "results": results
        if results is not None
        else [
            {
                "test": "/dom/a.html",
                "status": "OK",
                "message": None,
                "subtests": [
                    {"name": "first", "status": "PASS", "message": None},
                    {"name": "second", "status": "FAIL", "message": "assert_equals"},
                ],
            },
            {"test": "/dom/b.html", "status": "TIMEOUT", "subtests": []},
        ],
    }
    report.update(extra)
    return report


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


class TestRunFromReport:
    """Tests for run_from_report."""

    def test_run_info(self):
        run = run_from_report(_report(), "/tmp/chrome.json")
        assert run.product == Product("chrome", "120.0", "linux", "22.04")
        assert run.revision == "abc123"
        assert run.results_url == "/tmp/chrome.json"
        assert run.created_at == datetime.fromtimestamp(1600000000, tz=timezone.utc)

    def test_browser_name_preferred_over_product(self):
        report = _report()
        report["run_info"]["browser_name"] = "chrome_android"
        assert run_from_report(report, "x").browser_name == "chrome_android"

    def test_missing_browser(self):
        with pytest.raises(ReportLoadError, match="no browser_name"):
            run_from_report({"run_info": {}}, "x")

    def test_missing_time(self):
        report = _report()
        del report["time_start"]
        assert run_from_report(report, "x").created_at is None

    def test_time_start_out_of_range(self):
        with pytest.raises(ReportLoadError, match="time_start out of range") as exc_info:
            run_from_report(_report(time_start=1e30), "x")
        assert exc_info.value.original_error is not None

    def test_boolean_time_start_ignored(self):
        assert run_from_report(_report(time_start=True), "x").created_at is None


class TestLoadReport:
    """Tests for load_report."""

    def test_loads_results_in_order(self, tmp_path):
        results = load_report(_write(tmp_path, "chrome.json", _report()))
        assert [r.result.test for r in results] == ["/dom/a.html", "/dom/b.html"]
        assert results[0].result.status == "OK"
        assert results[0].result.subtests == (
            SubTest("first", "PASS", None),
            SubTest("second", "FAIL", "assert_equals"),
        )
        assert results[1].result.subtests == ()
        assert {r.run.browser_name for r in results} == {"chrome"}

    def test_run_override(self, tmp_path):
        run = TestRun(Product("firefox"))
        results = load_report(_write(tmp_path, "r.json", _report()), run=run)
        assert all(r.run is run for r in results)

    def test_missing_status_kept_empty(self, tmp_path):
        path = _write(tmp_path, "r.json", _report(results=[{"test": "/a.html"}]))
        assert load_report(path)[0].result.status == ""

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ReportLoadError, match="invalid JSON"):
            load_report(_write(tmp_path, "bad.json", "{not json"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ReportLoadError, match="file not found"):
            load_report(tmp_path / "missing.json")

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ReportLoadError, match="JSON object"):
            load_report(_write(tmp_path, "r.json", [1, 2]))

    def test_no_results(self, tmp_path):
        report = _report()
        del report["results"]
        with pytest.raises(ReportLoadError, match="no results list"):
            load_report(_write(tmp_path, "r.json", report))

    def test_result_without_test(self, tmp_path):
        path = _write(tmp_path, "r.json", _report(results=[{"status": "OK"}]))
        with pytest.raises(ReportLoadError, match=r"results\[0\] is missing test"):
            load_report(path)

    def test_subtest_without_name(self, tmp_path):
        path = _write(
            tmp_path,
            "r.json",
            _report(
                results=[{"test": "/a.html", "status": "OK", "subtests": [{"status": "PASS"}]}]
            ),
        )
        with pytest.raises(ReportLoadError, match=r"subtests\[0\] is missing name"):
            load_report(path)

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(
            b'{"run_info": {"product": "chrome"}, "results": [{"test": "\xff", "status": "OK"}]}'
        )
        with pytest.raises(ReportLoadError, match="invalid UTF-8"):
            load_report(path)

    @pytest.mark.parametrize(
        "entry, location",
        [
            ({"test": 5, "status": "OK"}, r"results\[0\]\.test"),
            ({"test": "/a.html", "status": 1}, r"results\[0\]\.status"),
            (
                {"test": "/a.html", "status": "OK", "subtests": [{"name": 3, "status": "PASS"}]},
                r"results\[0\]\.subtests\[0\]\.name",
            ),
            (
                {"test": "/a.html", "status": "OK", "subtests": [{"name": "s", "status": ["x"]}]},
                r"results\[0\]\.subtests\[0\]\.status",
            ),
        ],
    )
    def test_non_string_fields(self, tmp_path, entry, location):
        path = _write(tmp_path, "r.json", _report(results=[entry]))
        with pytest.raises(ReportLoadError, match=location + " must be a string"):
            load_report(path)

    def test_accepted_reports_aggregate_cleanly(self, tmp_path):
        results = load_report(_write(tmp_path, "chrome.json", _report()))
        totals = compute_totals(gather_results_by_id(results))
        assert totals["/dom/a.html"] == 3


class TestLoadReports:
    """Tests for load_reports."""

    def test_concatenates_in_file_order(self, tmp_path):
        chrome = _write(tmp_path, "chrome.json", _report("chrome"))
        firefox = _write(tmp_path, "firefox.json", _report("firefox"))
        results = load_reports([chrome, firefox])
        assert len(results) == 4
        assert [r.run.browser_name for r in results] == ["chrome", "chrome", "firefox", "firefox"]

    def test_empty(self):
        assert load_reports([]) == []
