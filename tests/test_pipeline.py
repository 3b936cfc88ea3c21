"""
test_pipeline.py — End-to-End Run & CLI Exit Codes
===================================================
The archive is simulated by a mocked ``requests.Session``.
"""

from __future__ import annotations

import datetime
import json
import os
import pathlib
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import requests

from activity_timeline import cli
from activity_timeline.archive_client import ArchiveClient, FetchError
from activity_timeline.config import Settings
from activity_timeline.date_window import InvalidDateError
from activity_timeline.pipeline import run


def _archive_session(snapshots: dict, fail_on: str | None = None) -> MagicMock:
    def handler(url, params, timeout):
        resp = requests.Response()
        resp.encoding = "utf-8"
        if params["toDate"] == fail_on:
            resp.status_code = 404
            resp._content = b"not found"
            return resp
        items = [{"key": k, "count": v} for k, v in snapshots.get(params["toDate"], {}).items()]
        resp.status_code = 200
        resp._content = json.dumps({"items": items}).encode("utf-8")
        return resp

    session = MagicMock()
    session.headers = {}
    session.get.side_effect = handler
    return session


WEEK = {
    "2021-03-01": {"A": 10},
    "2021-03-08": {"A": 100, "B": 5},
}


class TestRun(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.out = pathlib.Path(self._tmp.name) / "data.json"
        self.settings = Settings(
            access_token="tok", output_path=self.out, backoff_seconds=0.0, max_retries=0,
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _client(self, **kw) -> ArchiveClient:
        return ArchiveClient(self.settings, session=_archive_session(WEEK, **kw))

    def test_week_scenario(self):
        dataset = run(self.settings, date_arg="2021-03-01", client=self._client())

        payload = json.loads(self.out.read_text())
        self.assertEqual(payload, dataset.to_dict())
        self.assertEqual(payload["start_date"], "03-01-2021")
        self.assertEqual(payload["end_date"], "03-08-2021")

        groups = {g["key"]: g for g in payload["groups"]}
        self.assertEqual(groups["A"]["index"], 0)
        self.assertEqual(groups["B"]["index"], 1)
        self.assertEqual(groups["A"]["display_values"], [10, 0, 0, 0, 0, 0, 0, 100])
        self.assertEqual(groups["A"]["day_values"], [1, 0, 0, 0, 0, 0, 0, 2])
        self.assertEqual(groups["B"]["display_values"], [0, 0, 0, 0, 0, 0, 0, 5])
        self.assertEqual(groups["B"]["day_values"], [0] * 8)

    def test_default_window(self):
        dataset = run(self.settings, client=self._client(), today=datetime.date(2021, 3, 8))
        self.assertEqual(dataset.start_date, "03-01-2021")
        self.assertEqual(dataset.groups[0].display_values[-1], 100)

    def test_series_lengths_follow_window(self):
        settings = Settings(access_token="tok", output_path=self.out, window_days=3)
        client = ArchiveClient(settings, session=_archive_session({"2021-03-02": {"X": 4}}))
        dataset = run(settings, date_arg="2021-03-01", client=client)
        for group in dataset.groups:
            self.assertEqual(len(group.day_values), 4)
            self.assertEqual(len(group.display_values), 4)

    def test_fetch_failure_writes_nothing(self):
        with self.assertRaises(FetchError):
            run(self.settings, date_arg="2021-03-01", client=self._client(fail_on="2021-03-04"))
        self.assertFalse(self.out.exists())

    def test_bad_date_makes_no_requests(self):
        client = self._client()
        with self.assertRaises(InvalidDateError):
            run(self.settings, date_arg="31/31/2021", client=client)
        client._session.get.assert_not_called()
        self.assertFalse(self.out.exists())


class TestCli(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.out = pathlib.Path(self._tmp.name) / "data.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_parse_args(self):
        args = cli.parse_args(["2021-03-01", "--days", "14", "-o", "x.json", "-v"])
        self.assertEqual(args.date, "2021-03-01")
        self.assertEqual(args.days, 14)
        self.assertEqual(args.output, "x.json")
        self.assertTrue(args.verbose)

    def test_parse_args_defaults(self):
        args = cli.parse_args([])
        self.assertIsNone(args.date)
        self.assertIsNone(args.days)

    @patch.dict(os.environ, {}, clear=True)
    @patch("activity_timeline.archive_client.requests.Session")
    def test_missing_token_exits_1_without_network(self, mock_session_cls):
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["2021-03-01", "--output", str(self.out)])
        self.assertEqual(ctx.exception.code, 1)
        mock_session_cls.assert_not_called()
        self.assertFalse(self.out.exists())

    @patch.dict(os.environ, {"ACCESS_TOKEN": "tok"}, clear=True)
    @patch("activity_timeline.archive_client.requests.Session")
    def test_bad_date_exits_1(self, mock_session_cls):
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["definitely-not-a-date", "--output", str(self.out)])
        self.assertEqual(ctx.exception.code, 1)
        mock_session_cls.assert_not_called()

    @patch.dict(os.environ, {"ACCESS_TOKEN": "tok"}, clear=True)
    @patch("activity_timeline.archive_client.time.sleep")
    @patch("activity_timeline.archive_client.requests.Session")
    def test_fetch_failure_exits_1(self, mock_session_cls, _sleep):
        mock_session_cls.return_value = _archive_session(WEEK, fail_on="2021-03-02")
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["2021-03-01", "--output", str(self.out)])
        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(self.out.exists())

    @patch.dict(os.environ, {"ACCESS_TOKEN": "tok"}, clear=True)
    @patch("activity_timeline.archive_client.requests.Session")
    def test_success_writes_artifact(self, mock_session_cls):
        mock_session_cls.return_value = _archive_session(WEEK)
        cli.main(["2021-03-01", "--output", str(self.out)])
        payload = json.loads(self.out.read_text())
        self.assertEqual([g["key"] for g in payload["groups"]], ["A", "B"])


if __name__ == "__main__":
    unittest.main()
