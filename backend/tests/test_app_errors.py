from __future__ import annotations

from datetime import datetime
import os
from pathlib import Path
import sys
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from releasecheck.db.session import get_db_session
from releasecheck.main import app


def _no_db():
    yield None


class AppSurfaceTests(unittest.TestCase):
    def setUp(self) -> None:
        app.dependency_overrides[get_db_session] = _no_db
        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_health_reports_ok_with_timestamp(self) -> None:
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "OK")
        self.assertIsInstance(datetime.fromisoformat(body["timestamp"]), datetime)

    def test_unmatched_route_is_not_found(self) -> None:
        response = self.client.get("/api/unknown")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Not Found"})

    def test_uncaught_error_is_internal_server_error(self) -> None:
        with patch("releasecheck.api.releases.list_releases", side_effect=RuntimeError("boom")):
            response = self.client.get("/api/releases")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal Server Error"})

    def test_trace_id_is_echoed_or_generated(self) -> None:
        echoed = self.client.get("/health", headers={"X-Trace-Id": "trace-abc"})
        self.assertEqual(echoed.headers["X-Trace-Id"], "trace-abc")

        generated = self.client.get("/health")
        self.assertEqual(len(generated.headers["X-Trace-Id"]), 32)

    def test_unsafe_trace_id_is_replaced(self) -> None:
        for header_value in ("has spaces", "x" * 65, "quote\"d"):
            response = self.client.get("/health", headers={"X-Trace-Id": header_value})
            returned = response.headers["X-Trace-Id"]
            self.assertNotEqual(returned, header_value)
            self.assertEqual(len(returned), 32)

    def test_request_log_is_structured(self) -> None:
        with self.assertLogs("api", level="INFO") as captured:
            self.client.get("/health", headers={"X-Trace-Id": "trace-log"})

        request_lines = [line for line in captured.output if '"event": "http_request"' in line]
        self.assertEqual(len(request_lines), 1)
        self.assertIn('"trace_id": "trace-log"', request_lines[0])
        self.assertIn('"path": "/health"', request_lines[0])
        self.assertIn('"status_code": 200', request_lines[0])


if __name__ == "__main__":
    unittest.main()
