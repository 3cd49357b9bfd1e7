"""
Command-line interface for WPT metrics computation.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from .cancellation import CancelToken
from .classifiers import CLASSIFIERS
from .config import REPORT_FORMATS, ConfigurationError, load_config, validate_config
from .exceptions import ComputationCancelled, ReportLoadError
from .loader import load_reports
from .reporting import ConsoleReporter, JSONReporter
from .runner import MetricsRunner

logger = logging.getLogger(__name__)

EXIT_CANCELLED = 2


@click.command()
@click.argument("reports", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to configuration file (YAML)",
)
@click.option(
    "--policy",
    type=click.Choice(sorted(CLASSIFIERS)),
    help="Pass classification policy (overrides config)",
)
@click.option(
    "--browser-count",
    type=click.IntRange(min=0),
    help="Number of browsers in the agreed set (default: browsers found in reports)",
)
@click.option(
    "--report-format",
    type=click.Choice(REPORT_FORMATS),
    help="Report format (overrides config)",
)
@click.option(
    "--output",
    type=click.Path(),
    help="Output file for report (default: stdout)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Abort the computation after this many seconds (report loading is not counted)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="Logging level",
)
def main(
    reports: Tuple[str, ...],
    config: Optional[str],
    policy: Optional[str],
    browser_count: Optional[int],
    report_format: Optional[str],
    output: Optional[str],
    timeout: Optional[float],
    log_level: str,
) -> None:
    """
    WPT Metrics - Aggregate cross-browser test results for dashboards.

    Each REPORT is a wptreport JSON file from one browser run.

    Examples:

      # Summarize two runs on the console
      wpt-metrics chrome.json firefox.json

      # Lenient pass policy with a fixed browser set, JSON output
      wpt-metrics --policy lenient --browser-count 4 --report-format json \\
          --output metrics.json runs/*.json
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    try:
        logger.info("Loading configuration...")
        metrics_config = load_config(config)

        if policy:
            metrics_config.pass_policy = policy
        if browser_count is not None:
            metrics_config.browser_count = browser_count
        if report_format:
            metrics_config.report_format = report_format
        if timeout is not None:
            metrics_config.timeout_seconds = timeout

        errors = validate_config(metrics_config)
        if errors:
            click.echo("Configuration errors:", err=True)
            for error in errors:
                click.echo(f"  - {error}", err=True)
            sys.exit(1)

        results = load_reports(reports)
        # The deadline covers the computation only, not file loading
        cancel_token = CancelToken(metrics_config.timeout_seconds)
        summary = MetricsRunner(metrics_config, cancel_token).run(results)

        if metrics_config.report_format == "json":
            reporter = JSONReporter()
        else:
            reporter = ConsoleReporter(max_rows=metrics_config.console_max_rows)

        report = reporter.generate(summary)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report)
            click.echo(f"Report written to: {output}")
        else:
            click.echo(report)

        logger.info(
            "Metrics complete: %d tests, %d leaf units",
            len(summary.pass_rates),
            summary.total_units,
        )
        sys.exit(0)

    except ComputationCancelled as e:
        logger.warning("Computation cancelled: %s", e)
        click.echo(f"Computation cancelled: {e}", err=True)
        sys.exit(EXIT_CANCELLED)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except ReportLoadError as e:
        logger.error("Report error: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
