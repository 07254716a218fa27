"""CLI entry point — ``python -m yfp``."""

from __future__ import annotations

import argparse
import logging
import os
import sys

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

load_dotenv()

import yfp.writers  # noqa: F401,E402

from yfp.dates import Frequency, utc_today  # noqa: E402
from yfp.errors import YFPError  # noqa: E402
from yfp.models import load_settings  # noqa: E402
from yfp.pipeline import retrieve_historical_data  # noqa: E402
from yfp.registry import get_writer, list_registered  # noqa: E402
from yfp.writers.base import prepare_file_name  # noqa: E402

logger = logging.getLogger(__name__)

_FREQUENCY_HELP = {
    Frequency.DAILY: "One bar per trading day.",
    Frequency.WEEKLY: "One bar per week.",
    Frequency.MONTHLY: "One bar per month.",
}


def _print_formats() -> None:
    """Print all registered output writers."""
    print("\nFORMATS")
    print("-------")
    for key, class_name in list_registered().items():
        print(f"  {key:30s} {class_name}")
    print()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yfp",
        description="Download historical price bars from Yahoo Finance.",
    )
    parser.add_argument(
        "-t", "--ticker",
        help="Ticker of the stock you want data for.",
    )
    parser.add_argument(
        "-s", "--start",
        help="Start date (YYYY-MM-DD).",
    )
    parser.add_argument(
        "-e", "--end",
        help="End date (YYYY-MM-DD). If not specified, the current date is used.",
    )
    parser.add_argument(
        "-f", "--file-format",
        choices=sorted(list_registered()),
        help="Output file format.",
    )
    parser.add_argument(
        "-n", "--file-name",
        help=(
            "Output file name without extension. Defaults to "
            "yfp_<ticker>_<start>_<end>_<frequency>_<today>."
        ),
    )
    parser.add_argument(
        "-c", "--config",
        default=os.environ.get("YFP_CONFIG"),
        help="Path to a settings YAML file (default: $YFP_CONFIG).",
    )
    parser.add_argument(
        "-l", "--list-formats",
        action="store_true",
        default=False,
        help="List all registered output formats, then exit.",
    )

    subparsers = parser.add_subparsers(
        dest="frequency", metavar="{daily,weekly,monthly}", title="frequency"
    )
    for frequency in Frequency:
        subparsers.add_parser(frequency.value, help=_FREQUENCY_HELP[frequency])
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_formats:
        _print_formats()
        return

    missing = [
        flag
        for flag, value in (
            ("-t/--ticker", args.ticker),
            ("-s/--start", args.start),
            ("-f/--file-format", args.file_format),
            ("frequency", args.frequency),
        )
        if value is None
    ]
    if missing:
        parser.error(f"the following arguments are required: {', '.join(missing)}")

    try:
        settings = load_settings(args.config)
    except (OSError, yaml.YAMLError, ValidationError) as exc:
        parser.error(f"invalid config {args.config!r}: {exc}")

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    frequency = Frequency(args.frequency)
    today = utc_today()
    logger.info(
        "ticker=%s start=%s end=%s frequency=%s format=%s",
        args.ticker, args.start, args.end or "today", frequency, args.file_format,
    )

    try:
        writer = get_writer(args.file_format)()
        records = retrieve_historical_data(
            args.ticker,
            args.start,
            args.end,
            frequency,
            settings=settings,
            today=today,
        )
        file_name = prepare_file_name(
            args.ticker, args.start, args.end, frequency.value, args.file_name, today
        )
        path = writer.write(records, file_name)
    except YFPError as exc:
        print(f"yfp: error: {exc}", file=sys.stderr)
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        print("yfp: interrupted", file=sys.stderr)
        sys.exit(130)

    print(f"Saved {len(records)} records to {path}")


if __name__ == "__main__":
    main()
