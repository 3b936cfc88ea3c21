"""
utils.py — Shared helpers for the activity timeline pipeline
=============================================================
"""

from __future__ import annotations

import datetime
import logging
import sys


# ── structured logger ───────────────────────────────────────────────────────

def get_logger(name: str = "timeline", level: int = logging.INFO) -> logging.Logger:
    """
    Return a consistently-formatted logger writing to standard error.

    Format: ``[2021-03-08 08:15:23 UTC] [INFO] timeline.archive — message``
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            fmt="[%(asctime)s UTC] [%(levelname)s] %(name)s — %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        formatter.converter = lambda *_: datetime.datetime.now(
            datetime.timezone.utc,
        ).timetuple()
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def set_verbosity(verbose: bool) -> None:
    """Switch every ``timeline.*`` logger between INFO and DEBUG."""
    level = logging.DEBUG if verbose else logging.INFO
    for name in list(logging.root.manager.loggerDict):
        if name == "timeline" or name.startswith("timeline."):
            logging.getLogger(name).setLevel(level)


# ── formatting helpers ──────────────────────────────────────────────────────

def iso_day(day: datetime.date) -> str:
    """``YYYY-MM-DD`` form used by the archive API's ``toDate`` parameter."""
    return day.strftime("%Y-%m-%d")


def format_day(day: datetime.date, fmt: str = "%m-%d-%Y") -> str:
    """Locale-independent display date for the emitted dataset."""
    return day.strftime(fmt)
