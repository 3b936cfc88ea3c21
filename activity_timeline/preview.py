"""
preview.py — Heatmap Preview of an Emitted Dataset
===================================================
Renders the scaled series the frontend will draw as a key × day heatmap,
busiest keys at the top.  Handy for eyeballing a run before publishing.
"""

from __future__ import annotations

import pathlib
from typing import Any, Dict

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from activity_timeline.dataset import dataset_to_frame, key_totals
from activity_timeline.utils import get_logger

logger = get_logger("timeline.preview")


def render_preview(
    payload: Dict[str, Any],
    output_path: pathlib.Path | str,
    top_n: int = 25,
    date_format: str = "%m-%d-%Y",
) -> pathlib.Path:
    """
    Save a heatmap PNG of the ``top_n`` keys by total raw count.

    ``date_format`` must match the one the artifact was written with.
    """
    output_path = pathlib.Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    frame = dataset_to_frame(payload, date_format=date_format)
    top_keys = key_totals(frame)["key"].head(top_n).tolist()

    if top_keys:
        grid = (
            frame[frame["key"].isin(top_keys)]
            .pivot(index="key", columns="day", values="scaled")
            .reindex(top_keys)
        )
        values = grid.to_numpy(dtype=float)
        n_days = grid.shape[1]
    else:
        values = np.zeros((1, 1))
        n_days = 1

    fig, ax = plt.subplots(figsize=(max(6, n_days * 0.9), max(3, len(top_keys) * 0.35)))
    im = ax.imshow(values, aspect="auto", cmap="viridis", interpolation="nearest")
    ax.set_yticks(range(len(top_keys)))
    ax.set_yticklabels(top_keys, fontsize=8)
    ax.set_xticks(range(n_days))
    ax.set_xticklabels([f"Day {i + 1}" for i in range(n_days)], fontsize=8)
    ax.set_title(
        f"Scaled activity {payload.get('start_date', '?')} → {payload.get('end_date', '?')}"
    )
    fig.colorbar(im, ax=ax, label="Display ticks")

    plt.tight_layout()
    plt.savefig(output_path, dpi=120, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved preview heatmap -> %s", output_path)
    return output_path
