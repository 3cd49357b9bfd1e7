#!/usr/bin/env python3
"""
Cross-platform management script for wpt-metrics.
"""

import argparse
import os
import shutil
import subprocess
import sys
from typing import List


def run_command(command: List[str], env: dict = None, check: bool = True):
    """Run a shell command."""
    print(f"Running: {' '.join(command)}")
    try:
        subprocess.run(command, env=env, check=check)
    except subprocess.CalledProcessError as e:
        print(f"Error executing command: {e}")
        sys.exit(e.returncode)


def clean():
    """Clean up generated files."""
    print("Cleaning up...")
    dirs_to_remove = ["build", "dist", "metrics-output", "src/wpt_metrics.egg-info"]

    for d in dirs_to_remove:
        if os.path.exists(d):
            print(f"Removing {d}")
            shutil.rmtree(d)

    for root, dirs, files in os.walk("."):
        for d in dirs:
            if d == "__pycache__":
                shutil.rmtree(os.path.join(root, d))
        for f in files:
            if f.endswith(".pyc"):
                os.remove(os.path.join(root, f))


def install():
    """Install the package with test dependencies in editable mode."""
    print("Installing package in editable mode...")
    run_command([sys.executable, "-m", "pip", "install", "-e", ".[test]"])


def test():
    """Run all tests."""
    print("Running tests...")
    run_command([sys.executable, "-m", "pytest", "tests/", "-v"])


def compute(reports: List[str], policy: str):
    """Compute metrics for local report files into metrics-output/."""
    os.makedirs("metrics-output", exist_ok=True)
    output = os.path.join("metrics-output", f"metrics-{policy}.json")
    run_command(
        [
            sys.executable,
            "-m",
            "wpt_metrics.cli",
            "--policy",
            policy,
            "--report-format",
            "json",
            "--output",
            output,
        ]
        + reports
    )


def main():
    parser = argparse.ArgumentParser(description="Manage wpt-metrics")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("install", help="Install package and test dependencies")
    subparsers.add_parser("test", help="Run unit tests")
    subparsers.add_parser("clean", help="Clean up artifacts")
    compute_parser = subparsers.add_parser("compute", help="Compute metrics for report files")
    compute_parser.add_argument("reports", nargs="+", help="wptreport JSON files")
    compute_parser.add_argument("--policy", default="strict", choices=["strict", "lenient"])

    args = parser.parse_args()

    if args.command == "install":
        install()
    elif args.command == "test":
        test()
    elif args.command == "clean":
        clean()
    elif args.command == "compute":
        compute(args.reports, args.policy)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
