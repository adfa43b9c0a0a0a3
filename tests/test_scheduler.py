import asyncio
import unittest

from verification.scheduler import DeferredScheduler


class TestDeferredScheduler(unittest.IsolatedAsyncioTestCase):
    async def test_runs_callback_after_delay(self):
        scheduler = DeferredScheduler()
        calls = []

        async def callback():
            calls.append("ran")

        handle = scheduler.call_later(0.01, callback, name="probe")
        self.assertFalse(handle.done)

        await asyncio.sleep(0.05)
        self.assertEqual(calls, ["ran"])
        self.assertTrue(handle.done)

    async def test_cancel_prevents_callback(self):
        scheduler = DeferredScheduler()
        calls = []

        async def callback():
            calls.append("ran")

        handle = scheduler.call_later(0.05, callback)
        handle.cancel()
        await asyncio.sleep(0.1)

        self.assertEqual(calls, [])

    async def test_failing_callback_is_contained(self):
        scheduler = DeferredScheduler()

        async def boom():
            raise RuntimeError("boom")

        with self.assertLogs("verification.scheduler", level="ERROR"):
            scheduler.call_later(0, boom)
            await asyncio.sleep(0.02)

        self.assertEqual(scheduler.pending, 0)

    async def test_shutdown_cancels_pending(self):
        scheduler = DeferredScheduler()
        calls = []

        async def callback():
            calls.append("ran")

        scheduler.call_later(10, callback)
        self.assertEqual(scheduler.pending, 1)

        await scheduler.shutdown()
        self.assertEqual(scheduler.pending, 0)
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
