import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from app import main as main_mod
from app.checks.results import Success
from app.runner import MonitorState


class AppTests(unittest.TestCase):
    def _patched(self):
        return (
            patch.object(main_mod.settings, "MONITOR_TARGET_PATH", None),
            patch.object(main_mod.settings, "MONITOR_URL", "http://app.local/health"),
            patch.object(main_mod.settings, "MONITOR_INTERVAL", 0.05),
            patch.object(main_mod.settings, "MONITOR_TIMEOUT", 0.5),
            patch("app.runner.check_target", return_value=Success(latency_ms=12.5)),
        )

    def test_openapi_schema_generation(self) -> None:
        schema = main_mod.app.openapi()

        self.assertIn("paths", schema)
        self.assertIn("/health", schema["paths"])
        self.assertIn("/config", schema["paths"])
        self.assertIn("/api/status", schema["paths"])

    def test_websocket_receives_results_and_lifespan_stops_monitor(self) -> None:
        p1, p2, p3, p4, p5 = self._patched()
        with p1, p2, p3, p4, p5:
            with TestClient(main_mod.app) as client:
                self.assertEqual(client.get("/health").json(), {"status": "ok"})
                self.assertEqual(client.get("/config").json()["url"], "http://app.local/health")

                with client.websocket_connect("/ws") as ws:
                    first = ws.receive_text()
                    second = ws.receive_text()

                status = client.get("/api/status").json()
                monitor = main_mod.monitor

        self.assertEqual(first, "Web app responded in 12.5ms (HTTP 200)")
        self.assertEqual(second, first)
        self.assertEqual(status["state"], "running")
        self.assertGreaterEqual(status["ticks"], 2)
        self.assertTrue(status["last_result"]["ok"])
        self.assertIs(monitor.state, MonitorState.STOPPED)

    def test_incoming_frames_are_ignored(self) -> None:
        p1, p2, p3, p4, p5 = self._patched()
        with p1, p2, p3, p4, p5:
            with TestClient(main_mod.app) as client:
                with client.websocket_connect("/ws") as ws:
                    ws.send_bytes(b"ping")
                    ws.send_text("hello")
                    first = ws.receive_text()
                    second = ws.receive_text()

                status = client.get("/api/status").json()

        self.assertEqual(first, "Web app responded in 12.5ms (HTTP 200)")
        self.assertEqual(second, first)
        self.assertEqual(status["state"], "running")


if __name__ == "__main__":
    unittest.main()
