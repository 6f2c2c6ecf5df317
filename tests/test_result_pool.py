import unittest

from contracts.sample_set import SampleSet, SweepResult
from core.result_pool import ResultPool


def sweep(**samples):
    return SweepResult(
        entries={
            name: SampleSet(target=name, pings=3, samples=values)
            for name, values in samples.items()
        }
    )


class TestResultPool(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.pool = ResultPool()

    async def test_publish_and_get_latest(self):
        await self.pool.publish(sweep(a=[0.01, 0.02, 0.03]))
        latest = await self.pool.get_latest("a")
        self.assertEqual(latest.samples, [0.01, 0.02, 0.03])
        self.assertEqual(self.pool.sweeps_completed, 1)
        self.assertIsNotNone(self.pool.last_sweep_at)
        self.assertIsNone(await self.pool.get_latest("b"))

    async def test_later_sweep_replaces_earlier(self):
        await self.pool.publish(sweep(a=[0.01], b=[0.5]))
        await self.pool.publish(sweep(a=[0.02]))
        self.assertEqual((await self.pool.get_latest("a")).samples, [0.02])
        self.assertEqual((await self.pool.get_latest("b")).median, 0.5)
        self.assertEqual(self.pool.sweeps_completed, 2)

    async def test_retain_drops_removed_targets(self):
        await self.pool.publish(sweep(a=[0.01], b=[0.02]))
        await self.pool.retain(["a"])
        snapshot = await self.pool.snapshot()
        self.assertEqual(list(snapshot), ["a"])
        self.assertIsNone(await self.pool.get_latest("b"))


if __name__ == "__main__":
    unittest.main()
