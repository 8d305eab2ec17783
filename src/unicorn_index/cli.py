"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from unicorn_index import __version__
from unicorn_index.analysis.serialization import report_to_dict
from unicorn_index.config import MAX_ANALYSIS_DAYS, get_settings
from unicorn_index.errors import UnicornIndexError
from unicorn_index.flows.analyze import analyze_user


def analysis_days(value: str) -> int:
    """Parse ``--days``: a whole number from 1 to MAX_ANALYSIS_DAYS."""
    try:
        days = int(value)
    except ValueError:
        msg = f"invalid int value: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if not 1 <= days <= MAX_ANALYSIS_DAYS:
        msg = f"must be between 1 and {MAX_ANALYSIS_DAYS}, got {days}"
        raise argparse.ArgumentTypeError(msg)
    return days


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="unicorn-index",
        description="Compare a developer's GitHub activity with an industry baseline and the weather",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a GitHub user")
    analyze_parser.add_argument("username", help="GitHub username to analyze")
    analyze_parser.add_argument(
        "--org",
        dest="orgs",
        action="append",
        default=None,
        help="Baseline organization (repeatable; default: baseline_orgs from settings)",
    )
    analyze_parser.add_argument(
        "--days",
        type=analysis_days,
        default=None,
        help="Days of history to analyze (default: analysis_days from settings)",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full report as JSON",
    )

    subparsers.add_parser("info", help="Show application info")

    return parser


def cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the 'analyze' command."""
    try:
        report = analyze_user(args.username, orgs=args.orgs, days=args.days)
    except UnicornIndexError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report_to_dict(report), indent=2))
        return 0

    perf = report.performance
    print(f"Analysis for {report.username} ({report.start} to {report.end})")
    if perf.has_enough_data:
        print(
            f"Average score {perf.user_average} vs baseline {perf.baseline_average} "
            f"({perf.category})"
        )
    else:
        print(perf.message)
    print()
    for insight in report.insights:
        print(f"[{insight.confidence:.2f}] {insight.title}")
        print(f"    {insight.message}")
    return 0


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Baseline organizations: {', '.join(settings.baseline_orgs)}")
    print(f"Weather location: ({settings.lat}, {settings.lon}) {settings.timezone}")
    print(f"Analysis window: {settings.analysis_days} days")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if args.debug or get_settings().debug:
        logging.basicConfig(level=logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "analyze": cmd_analyze,
        "info": cmd_info,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
