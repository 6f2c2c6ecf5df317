import unittest

from prometheus_client import REGISTRY

from core.profiler import Profiler


class Sample:
    @Profiler.profile
    def add(self, a, b):
        return a + b

    @Profiler.profile
    async def add_async(self, a, b):
        return a + b

    @Profiler.profile
    def fail(self):
        raise ValueError("boom")


def observed(name):
    return REGISTRY.get_sample_value(
        "forkping_call_duration_seconds_count", {"function": f"Sample.{name}"}
    ) or 0


class TestProfiler(unittest.IsolatedAsyncioTestCase):
    async def test_wraps_sync_and_async(self):
        sample = Sample()
        before = observed("add")
        self.assertEqual(sample.add(1, 2), 3)
        self.assertEqual(await sample.add_async(1, 2), 3)
        self.assertEqual(observed("add"), before + 1)
        self.assertEqual(Sample.add.__name__, "add")

    async def test_records_failed_calls(self):
        before = observed("fail")
        with self.assertRaises(ValueError):
            Sample().fail()
        self.assertEqual(observed("fail"), before + 1)


if __name__ == "__main__":
    unittest.main()
