"""
CLI entry point for batch order pricing.

Reads a JSON array of orders, prices them and prints the batch report as
JSON on stdout.

Usage:
    python -m order_pricing orders.json
    python -m order_pricing orders.json --promo SAVE10 --month 12
    python -m order_pricing orders.json --minimum --strict --workers 4
    python -m order_pricing orders.json --csv priced_orders.csv --cents
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from order_pricing.batch import BatchAggregator
from order_pricing.config.settings import load_config_with_fallback
from order_pricing.shared.exceptions import ConfigurationError
from order_pricing.shared.logging_config import configure_structured_logging


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1 (got {number})")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order_pricing",
        description="Price a batch of purchase orders",
    )
    parser.add_argument("orders", type=Path, help="JSON file holding a list of orders")
    parser.add_argument("--config", type=Path, default=None, help="Configuration file")
    parser.add_argument("--promo", default=None, help="Promotional code for the batch")
    parser.add_argument(
        "--month", type=int, default=None, help="Calendar month (1-12) for seasonal rules"
    )
    parser.add_argument("--tax-rate", default=None, help="Override the tax rate")
    parser.add_argument(
        "--minimum", action="store_true", help="Reject orders below the minimum value"
    )
    parser.add_argument(
        "--strict", action="store_true", help="Reject orders whose final price is <= 0"
    )
    parser.add_argument(
        "--workers", type=positive_int, default=None, help="Worker threads for pricing"
    )
    parser.add_argument(
        "--cents", action="store_true", help="Round money fields in the output to cents"
    )
    parser.add_argument(
        "--no-details", action="store_true", help="Omit per-order detail from the report"
    )
    parser.add_argument(
        "--csv", type=Path, default=None, help="Also write the per-order table as CSV"
    )
    return parser


def load_orders(path: Path) -> list:
    """Load the order list, raising ValueError for anything but a JSON array."""
    with path.open("r") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of orders")
    return data


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config_with_fallback(args.config)
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    configure_structured_logging(level=config.log_level)

    overrides = {}
    if args.promo is not None:
        overrides["promotionalCode"] = args.promo
    if args.month is not None:
        overrides["currentMonth"] = args.month
    if args.tax_rate is not None:
        overrides["taxRate"] = args.tax_rate
    if args.minimum:
        overrides["requireMinimumValue"] = True
    if args.strict:
        overrides["strictMode"] = True

    try:
        options = config.defaults.merged(overrides)
        orders = load_orders(args.orders)
    except (OSError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    aggregator = BatchAggregator(max_workers=args.workers or config.max_workers)
    report = aggregator.process(orders, options, include_details=not args.no_details)

    if args.cents:
        report = report.rounded()

    print(report.model_dump_json(by_alias=True, indent=2))

    if args.csv is not None:
        if args.no_details:
            print("❌ --csv needs per-order detail", file=sys.stderr)
            return 2
        report.to_dataframe().to_csv(args.csv, index=False)
        print(f"✅ Wrote {report.total} rows to {args.csv}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
