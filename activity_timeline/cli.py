"""
cli.py — Command-Line Entry Point
==================================

Usage
-----
    ACCESS_TOKEN=... activity-timeline              # 7 days ending today
    ACCESS_TOKEN=... activity-timeline 2021-03-01   # 2021-03-01 → 2021-03-08
    activity-timeline 2021-03-01 --days 14 --output public/data.json

Exit status is 0 on success and 1 on any failure (missing token, bad
date, fetch failure, write failure).
"""

from __future__ import annotations

import argparse
import sys
import traceback

from activity_timeline.config import ConfigError, load_settings
from activity_timeline.pipeline import run
from activity_timeline.utils import get_logger, set_verbosity

logger = get_logger("timeline.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Build the scaled activity timeline dataset from the social "
            "media archive API."
        ),
    )
    parser.add_argument(
        "date",
        nargs="?",
        default=None,
        help=(
            "Window start date, e.g. 2021-03-15. "
            "Default: the window ending today."
        ),
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Window length N; the run covers N + 1 days (default: 7).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output JSON path (default: data.json or $ACTIVITY_OUTPUT_PATH).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    set_verbosity(args.verbose)

    try:
        settings = load_settings(window_days=args.days, output_path=args.output)
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    try:
        run(settings, date_arg=args.date)
    except KeyboardInterrupt:
        raise
    except Exception:
        logger.error("Pipeline failed:\n%s", traceback.format_exc())
        sys.exit(1)


if __name__ == "__main__":
    main()
