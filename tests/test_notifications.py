import unittest
from unittest.mock import MagicMock
import os
import sys
import threading

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from studymonk.notifications import NotificationService, TTLCache
from studymonk.platform_client import PlatformError


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestNotificationService(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.client = MagicMock()
        self.service = NotificationService(self.client, TTLCache(clock=self.clock))

    def test_list_is_cached(self):
        self.client.get_notifications.return_value = {"success": True, "data": {"notifications": [{"_id": "n1"}]}}

        first = self.service.get_notifications(token="t1")
        self.clock.now += 29
        second = self.service.get_notifications(token="t1")

        self.assertEqual(first, second)
        self.client.get_notifications.assert_called_once_with(token="t1")

        self.clock.now += 2
        self.service.get_notifications(token="t1")
        self.assertEqual(self.client.get_notifications.call_count, 2)

    def test_cache_is_per_token(self):
        self.client.get_notifications.return_value = {"success": True, "data": {"notifications": []}}
        self.service.get_notifications(token="t1")
        self.service.get_notifications(token="t2")
        self.assertEqual(self.client.get_notifications.call_count, 2)

    def test_rate_limited_list(self):
        self.client.get_notifications.side_effect = PlatformError(429, "Too many requests")

        with self.assertRaises(PlatformError) as ctx:
            self.service.get_notifications(token="t1")
        self.assertEqual(ctx.exception.status, 429)

        # the empty list stands in for a minute
        self.clock.now += 59
        cached = self.service.get_notifications(token="t1")
        self.assertEqual(cached["data"]["notifications"], [])
        self.assertEqual(self.client.get_notifications.call_count, 1)

    def test_unread_count(self):
        self.client.get_unread_count.return_value = {"success": True, "data": {"count": 3}}

        self.assertEqual(self.service.unread_count(token="t1"), 3)
        self.clock.now += 10
        self.assertEqual(self.service.unread_count(token="t1"), 3)
        self.client.get_unread_count.assert_called_once()

        self.clock.now += 6
        self.client.get_unread_count.return_value = {"success": True, "data": {"count": 1}}
        self.assertEqual(self.service.unread_count(token="t1"), 1)

    def test_unread_count_failure(self):
        self.client.get_unread_count.side_effect = PlatformError(500, "down")
        self.assertEqual(self.service.unread_count(token="t1"), 0)
        # plain failures are not cached
        self.service.unread_count(token="t1")
        self.assertEqual(self.client.get_unread_count.call_count, 2)

        self.client.get_unread_count.side_effect = PlatformError(429, "slow down")
        self.service.unread_count(token="t2")
        self.service.unread_count(token="t2")
        self.assertEqual(self.client.get_unread_count.call_count, 3)

    def test_mark_read_invalidates(self):
        self.client.get_unread_count.return_value = {"success": True, "data": {"count": 2}}
        self.client.mark_notification_read.return_value = {"success": True}
        self.service.unread_count(token="t1")

        self.service.mark_read("n1", token="t1")
        self.client.get_unread_count.return_value = {"success": True, "data": {"count": 1}}

        self.assertEqual(self.service.unread_count(token="t1"), 1)
        self.client.mark_notification_read.assert_called_once_with("n1", token="t1")

    def test_mark_all_read(self):
        self.client.mark_all_notifications_read.return_value = {"success": True, "message": "done"}
        self.assertEqual(self.service.mark_all_read(token="t1")["message"], "done")


class TestTTLCache(unittest.TestCase):
    def test_expired_entries_are_purged_on_write(self):
        clock = FakeClock()
        client = MagicMock()
        client.get_unread_count.return_value = {"success": True, "data": {"count": 1}}
        cache = TTLCache(clock=clock)
        service = NotificationService(client, cache)

        for i in range(1000):
            service.unread_count(token=f"token-{i}")
        self.assertEqual(len(cache), 1000)

        clock.now += 3600
        service.unread_count(token="late")
        self.assertEqual(len(cache), 1)

    def test_size_is_capped(self):
        clock = FakeClock()
        cache = TTLCache(clock=clock, max_entries=3)
        cache.set("a", 1, 10)
        cache.set("b", 2, 30)
        cache.set("c", 3, 20)

        cache.set("d", 4, 40)

        self.assertEqual(len(cache), 3)
        # the entry closest to expiry makes room
        self.assertIsNone(cache.get("a"))
        self.assertEqual(cache.get("d"), 4)

        cache.set("b", 5, 40)
        self.assertEqual(cache.get("c"), 3)

    def test_shared_between_threads(self):
        cache = TTLCache()
        errors = []

        def writer(n):
            try:
                for i in range(500):
                    cache.set(f"t{n}:notifications:{i}", i, 60)
            except RuntimeError as e:
                errors.append(e)

        def invalidator():
            try:
                for _ in range(200):
                    cache.invalidate_prefix("t0:")
            except RuntimeError as e:
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(3)]
        threads.append(threading.Thread(target=invalidator))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])


if __name__ == "__main__":
    unittest.main()
