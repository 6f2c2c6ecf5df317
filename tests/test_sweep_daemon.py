import asyncio
import unittest
from unittest.mock import AsyncMock

from contracts.sample_set import SweepResult
from contracts.target import Target
from core.exceptions import InvalidConfig
from core.result_pool import ResultPool
from core.scheduler import ConcurrencyScheduler
from core.sweep_daemon import SweepDaemon, seconds_until_next_sweep
from core.thread_runner import ThreadWorkerRunner
from core.timeout_policy import TimeoutPolicy
from probes.scripted_probe import ScriptedProbe


class TestSecondsUntilNextSweep(unittest.TestCase):
    def test_offset_into_step(self):
        self.assertAlmostEqual(seconds_until_next_sweep(10, 300, 0.5), 140)
        self.assertAlmostEqual(seconds_until_next_sweep(200, 300, 0.5), 250)

    def test_no_offset(self):
        self.assertAlmostEqual(seconds_until_next_sweep(299, 300, 0), 1)
        self.assertAlmostEqual(seconds_until_next_sweep(300, 300, 0), 300)

    def test_always_positive(self):
        for now in (0, 0.5, 59.9, 60, 1234.5):
            delay = seconds_until_next_sweep(now, 60, 0.25)
            self.assertGreater(delay, 0)
            self.assertLessEqual(delay, 60)


class TestSweepDaemon(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.scheduler = ConcurrencyScheduler(runner=ThreadWorkerRunner())
        self.probe = ScriptedProbe(script={"a": [0.01], "b": [0.02]}, pings=2)
        self.targets = [Target(name="a", probe="scripted"), Target(name="b", probe="scripted")]
        self.pool = ResultPool()

    def test_rejects_bad_schedule(self):
        with self.assertRaises(InvalidConfig):
            SweepDaemon(self.scheduler, self.targets, {"scripted": self.probe}, step=0)
        with self.assertRaises(InvalidConfig):
            SweepDaemon(self.scheduler, self.targets, {"scripted": self.probe}, offset=1.0)

    async def test_run_once_publishes(self):
        daemon = SweepDaemon(self.scheduler, self.targets, {"scripted": self.probe}, self.pool)
        result = await daemon.run_once()
        self.assertEqual(set(result.names()), {"a", "b"})
        latest = await self.pool.get_latest("b")
        self.assertEqual(latest.samples, [0.02, 0.02])
        self.assertEqual(self.pool.sweeps_completed, 1)

    async def test_loop_sweeps_every_step(self):
        daemon = SweepDaemon(
            self.scheduler, self.targets, {"scripted": self.probe}, self.pool, step=0.05, offset=0
        )
        await daemon.start()
        await asyncio.sleep(0.4)
        await daemon.stop()
        self.assertGreaterEqual(self.pool.sweeps_completed, 2)
        self.assertIsNone(daemon._task)

    async def test_failed_sweep_does_not_stop_loop(self):
        scheduler = AsyncMock()
        scheduler.sweep = AsyncMock(side_effect=[RuntimeError("boom"), SweepResult()] * 10)
        daemon = SweepDaemon(scheduler, self.targets, {}, self.pool, step=0.05, offset=0)
        await daemon.start()
        await asyncio.sleep(0.4)
        await daemon.stop()
        self.assertGreaterEqual(scheduler.sweep.await_count, 2)
        self.assertGreaterEqual(self.pool.sweeps_completed, 1)

    async def test_reconfigure_replaces_targets(self):
        daemon = SweepDaemon(self.scheduler, self.targets, {"scripted": self.probe}, self.pool)
        await daemon.run_once()
        await daemon.reconfigure([Target(name="a", probe="scripted")])
        result = await daemon.run_once()
        self.assertEqual(result.names(), ["a"])
        snapshot = await self.pool.snapshot()
        self.assertEqual(list(snapshot), ["a"])

    async def test_budget_follows_reconfigured_variables(self):
        scheduler = ConcurrencyScheduler(
            runner=ThreadWorkerRunner(), timeout_policy=TimeoutPolicy(margin=0.5)
        )
        probe = ScriptedProbe(script={"a": [0.01]})
        daemon = SweepDaemon(
            scheduler,
            [Target(name="a", probe="scripted", variables={"pings": 2, "timeout": 1})],
            {"scripted": probe},
            self.pool,
        )
        first = await daemon.run_once()
        self.assertEqual(first["a"].budget, 2.5)

        await daemon.reconfigure(
            [Target(name="a", probe="scripted", variables={"pings": 3, "timeout": 2})]
        )
        second = await daemon.run_once()
        self.assertEqual(second["a"].budget, 6.5)
        self.assertEqual(second["a"].pings, 3)

        # Without target overrides the reloaded probe-wide values apply
        await daemon.reconfigure(
            [Target(name="a", probe="scripted")],
            {"scripted": ScriptedProbe(script={"a": [0.01]}, pings=4, timeout=0.25)},
        )
        third = await daemon.run_once()
        self.assertEqual(third["a"].budget, 1.5)
        self.assertEqual(third["a"].samples, [0.01] * 4)


if __name__ == "__main__":
    unittest.main()
