"""
pipeline.py — One Full Run
===========================
window → fetch (parallel, one request per day) → aggregate → scale → write

Nothing is written unless every stage succeeds.
"""

from __future__ import annotations

import datetime
import time

from activity_timeline.aggregator import aggregate_days
from activity_timeline.archive_client import ArchiveClient
from activity_timeline.config import Settings
from activity_timeline.dataset import Dataset, write_dataset
from activity_timeline.date_window import build_window
from activity_timeline.scaler import DisplayScaler
from activity_timeline.utils import get_logger

logger = get_logger("timeline.pipeline")


def run(
    settings: Settings,
    date_arg: str | None = None,
    client: ArchiveClient | None = None,
    today: datetime.date | None = None,
) -> Dataset:
    """Execute one pipeline cycle and return the dataset that was written."""
    start_time = time.time()

    window = build_window(date_arg, length_days=settings.window_days, today=today)
    days = window.days
    logger.info(
        "Window %s → %s (%d days)",
        window.start.isoformat(), window.end.isoformat(), len(days),
    )

    owns_client = client is None
    client = client or ArchiveClient(settings)
    try:
        day_records = client.fetch_window(days)
    finally:
        if owns_client:
            client.close()

    result = aggregate_days(day_records)
    scaler = DisplayScaler.from_settings(settings)
    groups = scaler.apply(result.groups, result.max_value)

    dataset = Dataset.from_window(window, groups, settings.output_date_format)
    write_dataset(dataset, settings.output_path)

    busiest = max(groups, key=lambda g: sum(g.display_values), default=None)
    logger.info(
        "Run complete: %d keys, max count %d, busiest key %s (took %.2fs)",
        len(groups), result.max_value,
        busiest.key if busiest else "—", time.time() - start_time,
    )
    return dataset
