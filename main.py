#!/usr/bin/env python3
"""
main.py — Activity Timeline: Entry Point
=========================================
Fetches a week of daily activity snapshots from the social media archive,
scales them for display and writes ``data.json`` for the timeline frontend.

Modes
-----
    python main.py                  # the 7 days ending today
    python main.py 2021-03-01       # 2021-03-01 → 2021-03-08
    python main.py 2021-03-01 --days 14 --output public/data.json

Requires ``ACCESS_TOKEN`` in the environment or in ``.env``.
"""

from activity_timeline.cli import main


if __name__ == "__main__":
    main()
