import threading
import unittest

from shard_core.errors import WindowRangeError
from shard_core.ordering import order_by
from shard_core.records import Record, projection
from shard_core.shard import Shard
from shard_core.windows import QuerySession, ResultWindow


def window(skip, keep):
    result = ResultWindow()
    for _ in range(skip):
        result.inc_skip()
    for _ in range(keep):
        result.inc_keep()
    return result


def over_thirty(record):
    return record.get_int("age") > 30


def everything(record):
    return True


class TestResultWindow(unittest.TestCase):
    def test_increments_return_new_value(self):
        w = ResultWindow()
        self.assertEqual((w.skip, w.keep), (0, 0))
        self.assertEqual(w.inc_skip(), 1)
        self.assertEqual(w.inc_skip(), 2)
        self.assertEqual(w.inc_keep(), 1)
        self.assertEqual((w.skip, w.keep, w.span), (2, 1, 3))

    def test_counters_are_read_only(self):
        w = ResultWindow()
        with self.assertRaises(AttributeError):
            w.skip = 5


class TestShardQuery(unittest.TestCase):
    def setUp(self):
        self.shard = Shard("Shard-A")
        for record_id, age in [(1, 25), (2, 40), (3, 35), (4, 50), (5, 20)]:
            self.shard.save(Record(id=record_id, age=age, name=f"p{record_id}"))
        self.by_age = order_by("age")
        self.ids = projection("id")

    def test_filters_sorts_limits_and_transforms(self):
        rows = self.shard.query(over_thirty, self.by_age, self.ids, 2)
        self.assertEqual(rows, [Record(id=3), Record(id=2)])

    def test_get_window_reapplies_transform_to_cached_rows(self):
        self.shard.query(over_thirty, self.by_age, self.ids, 3)
        self.assertEqual(self.shard.get_window(window(1, 1)), [Record(id=2)])
        self.assertEqual(self.shard.get_window(window(0, 3)), [Record(id=3), Record(id=2), Record(id=4)])

    def test_window_past_cache_raises(self):
        self.shard.query(over_thirty, self.by_age, self.ids, 2)
        with self.assertRaises(WindowRangeError) as cm:
            self.shard.get_window(window(1, 2))
        self.assertEqual(cm.exception.available, 2)
        self.assertEqual(cm.exception.shard_id, "Shard-A")

    def test_window_without_prior_query(self):
        self.assertEqual(self.shard.get_window(window(0, 0)), [])
        with self.assertRaises(WindowRangeError):
            self.shard.get_window(window(0, 1))

    def test_zero_limit_returns_empty_and_clears_cache(self):
        self.shard.query(everything, self.by_age, self.ids, 3)
        self.assertEqual(self.shard.query(everything, self.by_age, self.ids, 0), [])
        with self.assertRaises(WindowRangeError):
            self.shard.get_window(window(0, 1))

    def test_negative_limit_is_rejected(self):
        with self.assertRaises(ValueError):
            self.shard.query(everything, self.by_age, self.ids, -1)

    def test_offline_shard_returns_empty_and_keeps_cache(self):
        self.shard.query(over_thirty, self.by_age, self.ids, 3)
        self.shard.online = False
        self.assertEqual(self.shard.query(everything, self.by_age, self.ids, 5), [])
        self.assertEqual(len(self.shard.get_window(window(0, 3))), 3)

    def test_ties_keep_arrival_order(self):
        shard = Shard("Shard-T")
        for record_id in (9, 3, 7):
            shard.save(Record(id=record_id, age=30))
        rows = shard.query(everything, self.by_age, self.ids, 3)
        self.assertEqual([row["id"] for row in rows], [9, 3, 7])

    def test_snapshot(self):
        self.assertEqual(self.shard.snapshot(), {"id": "Shard-A", "online": True, "records": 5})


class TestQuerySession(unittest.TestCase):
    def setUp(self):
        self.shard = Shard("Shard-S")
        for record_id, age in [(1, 31), (2, 45), (3, 18)]:
            self.shard.save(Record(id=record_id, age=age))

    def test_session_holds_untransformed_rows(self):
        session = self.shard.open_session(over_thirty, order_by("age"), 10)
        self.assertIsInstance(session, QuerySession)
        self.assertEqual(list(session.records), [Record(id=1, age=31), Record(id=2, age=45)])
        self.assertEqual(session.window(window(1, 1)), [Record(id=2, age=45)])

    def test_session_is_not_disturbed_by_later_queries(self):
        session = self.shard.open_session(over_thirty, order_by("age"), 10)
        self.shard.query(everything, order_by("-age"), projection("id"), 1)
        self.assertEqual(len(session.window(window(0, 2))), 2)

    def test_session_window_overrun_raises(self):
        session = self.shard.open_session(over_thirty, order_by("age"), 1)
        with self.assertRaises(WindowRangeError):
            session.window(window(0, 2))

    def test_offline_session_is_empty(self):
        self.shard.online = False
        session = self.shard.open_session(everything, order_by("age"), 10)
        self.assertFalse(session.online)
        self.assertEqual(len(session), 0)
        self.assertEqual(session.window(ResultWindow()), [])


class TestConcurrentSaves(unittest.TestCase):
    def test_parallel_appends_are_not_lost(self):
        shard = Shard("Shard-C")

        def writer(base):
            for offset in range(250):
                shard.save(Record(id=base + offset))

        threads = [threading.Thread(target=writer, args=(n * 1000,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(shard.records_loaded, 2000)


if __name__ == "__main__":
    unittest.main()
