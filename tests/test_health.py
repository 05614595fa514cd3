"""Health endpoint tests."""

import logging
import time
import unittest
from unittest.mock import patch

from tests.helpers import ApiTestCase


class TestHealth(ApiTestCase):
    def test_connected(self) -> None:
        r = self.client.get(self.url("/health"))
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["email"], "log")
        self.assertIn("timestamp", body)

    def test_degraded_when_database_unreachable(self) -> None:
        with patch("app.api.v1.health.ping", return_value=False):
            body = self.client.get(self.url("/health")).json()
        self.assertEqual(body["status"], "degraded")
        self.assertEqual(body["database"], "disconnected")

    def test_unknown_route_uses_error_envelope(self) -> None:
        r = self.client.get(self.url("/nope"))
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json(), {"success": False, "error": "Route not found"})


class TestLogging(unittest.TestCase):
    def test_timestamps_are_utc(self) -> None:
        self.assertIs(logging.Formatter.converter, time.gmtime)


if __name__ == "__main__":
    unittest.main()
