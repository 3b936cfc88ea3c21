"""
scaler.py — Display Curve Compression
======================================
Raw activity counts are heavily right-skewed: a few keys dominate.  The
display curve

    scaled(v) = round((1 - (1 - v / max) ** p) * max / D)

lifts low counts away from zero while capping the top at ``max / D``
(the number of discrete ticks the frontend draws).

Rounding is half-up (``floor(x + 0.5)``).  ``max <= 0`` maps every value
to 0.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from activity_timeline.aggregator import KeyGroup
from activity_timeline.config import Settings
from activity_timeline.utils import get_logger

logger = get_logger("timeline.scale")


class DisplayScaler:
    """Power-curve scaler parameterised by curve degree ``p`` and divisor ``D``."""

    def __init__(self, curve_degree: float = 3, divisor: float = 50) -> None:
        if curve_degree <= 0:
            raise ValueError(f"curve_degree must be > 0, got {curve_degree}")
        if divisor <= 0:
            raise ValueError(f"divisor must be > 0, got {divisor}")
        self.curve_degree = curve_degree
        self.divisor = divisor

    @classmethod
    def from_settings(cls, settings: Settings) -> "DisplayScaler":
        return cls(curve_degree=settings.curve_degree, divisor=settings.divisor)

    def scale_series(self, values: Sequence[int], max_value: float) -> List[int]:
        """Vectorised curve over one series."""
        raw = np.asarray(values, dtype=float)
        if max_value <= 0:
            return [0] * len(raw)
        f = 1.0 - raw / max_value
        inv = 1.0 - f ** self.curve_degree
        scaled = np.floor(inv * max_value / self.divisor + 0.5)
        return [int(v) for v in scaled]

    def scale_value(self, value: int, max_value: float) -> int:
        return self.scale_series([value], max_value)[0]

    def apply(self, groups: Sequence[KeyGroup], max_value: float) -> List[KeyGroup]:
        """
        Overwrite each group's ``day_values`` with its scaled series.

        ``display_values`` keeps the raw counts.
        """
        if max_value <= 0:
            logger.warning("No activity in window (max = 0); all scaled values are 0")
        for group in groups:
            group.day_values = self.scale_series(group.display_values, max_value)
        logger.debug(
            "Scaled %d series (p=%s, D=%s, max=%s)",
            len(groups), self.curve_degree, self.divisor, max_value,
        )
        return list(groups)
