"""
test_date_window.py — Unit Tests for Window Construction
=========================================================
A window of length N always spans N + 1 calendar days.
"""

from __future__ import annotations

import datetime
import unittest

from activity_timeline.date_window import (
    DateWindow,
    InvalidDateError,
    build_window,
    parse_start_date,
)


class TestParseStartDate(unittest.TestCase):

    def test_iso_date(self):
        self.assertEqual(parse_start_date("2021-03-15"), datetime.date(2021, 3, 15))

    def test_time_of_day_ignored(self):
        self.assertEqual(
            parse_start_date("2021-03-15T23:59:00"),
            datetime.date(2021, 3, 15),
        )

    def test_garbage_raises(self):
        with self.assertRaises(InvalidDateError):
            parse_start_date("not a date")

    def test_blank_raises(self):
        with self.assertRaises(InvalidDateError):
            parse_start_date("   ")

    def test_invalid_calendar_day_raises(self):
        with self.assertRaises(InvalidDateError):
            parse_start_date("2021-02-30")

    def test_is_value_error(self):
        """Callers catching ValueError still see bad dates."""
        self.assertTrue(issubclass(InvalidDateError, ValueError))


class TestBuildWindow(unittest.TestCase):

    def test_explicit_start(self):
        window = build_window("2021-03-01", length_days=7)
        self.assertEqual(window.start, datetime.date(2021, 3, 1))
        self.assertEqual(window.end, datetime.date(2021, 3, 8))
        self.assertEqual(len(window.days), 8)
        self.assertEqual(window.days[0], window.start)
        self.assertEqual(window.days[-1], window.end)

    def test_default_window_ends_today(self):
        today = datetime.date(2021, 3, 15)
        with self.assertLogs("timeline.window", level="INFO") as logs:
            window = build_window(None, length_days=7, today=today)
        self.assertEqual(window.end, today)
        self.assertEqual(window.start, datetime.date(2021, 3, 8))
        self.assertIn("No date provided", logs.output[0])

    def test_days_are_consecutive(self):
        window = build_window("2020-02-25", length_days=7)
        steps = {(b - a).days for a, b in zip(window.days, window.days[1:])}
        self.assertEqual(steps, {1})
        self.assertIn(datetime.date(2020, 2, 29), window.days)

    def test_length_always_n_plus_one(self):
        for n in (1, 3, 7, 14, 31):
            window = build_window("2021-12-25", length_days=n)
            self.assertEqual(len(window.days), n + 1)
            self.assertEqual(len(window), n + 1)

    def test_bad_argument_raises(self):
        with self.assertRaises(InvalidDateError):
            build_window("yesterday-ish", length_days=7)

    def test_window_invariant_enforced(self):
        with self.assertRaises(ValueError):
            DateWindow(
                start=datetime.date(2021, 3, 1),
                end=datetime.date(2021, 3, 5),
                length_days=7,
            )


if __name__ == "__main__":
    unittest.main()
