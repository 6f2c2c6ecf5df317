import unittest

from fastapi.testclient import TestClient

from contracts.target import Target
from core.scheduler import ConcurrencyScheduler
from core.sweep_daemon import SweepDaemon
from core.thread_runner import ThreadWorkerRunner
from probes.scripted_probe import ScriptedProbe
from server import create_app


class TestServer(unittest.TestCase):
    def setUp(self):
        probe = ScriptedProbe(script={"a": [0.02, None, 0.01]}, pings=3, timeout=1)
        self.daemon = SweepDaemon(
            ConcurrencyScheduler(runner=ThreadWorkerRunner()),
            [Target(name="a", probe="scripted"), Target(name="b", probe="missing")],
            {"scripted": probe},
            step=300,
        )
        self.app = create_app(self.daemon)

    def test_sweep_and_results(self):
        with TestClient(self.app) as client:
            response = client.post("/sweep")
            self.assertEqual(response.status_code, 200)
            entries = response.json()["entries"]
            self.assertEqual(entries["a"]["samples"], [0.01, 0.02])
            self.assertEqual(entries["b"]["status"], "no_data")

            response = client.get("/results/a")
            self.assertEqual(response.status_code, 200)
            data = response.json()
            self.assertEqual(data["loss"], 1)
            self.assertAlmostEqual(data["median"], 0.015)

            response = client.get("/results")
            self.assertEqual(set(response.json()), {"a", "b"})

    def test_unknown_target(self):
        with TestClient(self.app) as client:
            response = client.get("/results/zzz")
            self.assertEqual(response.status_code, 404)

    def test_healthz(self):
        with TestClient(self.app) as client:
            data = client.get("/healthz").json()
            self.assertEqual(data["status"], "ok")
            self.assertEqual(data["targets"], 2)
            self.assertIsInstance(data["sweeps_completed"], int)

    def test_metrics_endpoint(self):
        with TestClient(self.app) as client:
            client.post("/sweep")
            response = client.get("/metrics")
            self.assertEqual(response.status_code, 200)
            self.assertIn("text/plain", response.headers["content-type"])
            self.assertIn("forkping_ping_latency_seconds", response.text)


if __name__ == "__main__":
    unittest.main()
