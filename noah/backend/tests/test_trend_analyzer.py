import os
import sys
import unittest
from datetime import datetime, timedelta

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from noah.backend.app import trend_analyzer
from noah.backend.app.errors import StoreWriteError
from noah.backend.app.models import QUESTIONS, CheckInEntry, CheckInPayload, Flag
from noah.backend.app.store import EntryStore


class RecordingStore(EntryStore):
    def __init__(self, fail_writes=False):
        self.fail_writes = fail_writes
        self.updates = []

    def fetch_recent_check_ins(self, user_id, limit):
        return []

    def fetch_entries_in_range(self, user_id, start, end, kind):
        return []

    def persist(self, entry):
        pass

    def update_flags(self, entry_id, flags):
        if self.fail_writes:
            raise StoreWriteError("write rejected")
        self.updates.append((entry_id, set(flags)))


BASE = datetime(2025, 3, 10, 8, 0)


def check_in(index, values, flags=None):
    responses = dict(zip(QUESTIONS, values))
    return CheckInEntry(
        payload=CheckInPayload(
            id=f"c{index}",
            user_id="user-1",
            timestamp=BASE - timedelta(days=index),
            responses=responses,
        ),
        flags=set(flags or []),
    )


class TrendAnalyzerTests(unittest.TestCase):
    def test_two_entries_are_not_enough(self):
        store = RecordingStore()
        entries = [check_in(0, [1] * 8), check_in(1, [1] * 8)]
        result = trend_analyzer.analyze_trend(entries, store)
        self.assertIs(result, entries)
        self.assertEqual(entries[0].flags, set())
        self.assertEqual(store.updates, [])

    def test_declining_window(self):
        store = RecordingStore()
        entries = [
            check_in(0, [2] * 8, flags=[Flag.NEEDS_ATTENTION]),
            check_in(1, [2, 3] * 4),
            check_in(2, [2, 2, 2, 2, 1]),
        ]
        result = trend_analyzer.analyze_trend(entries, store)
        self.assertIs(result, entries[0])
        self.assertEqual(result.flags, {Flag.NEEDS_ATTENTION, Flag.DECLINING})
        self.assertEqual(store.updates, [("c0", {Flag.NEEDS_ATTENTION, Flag.DECLINING})])
        self.assertEqual(entries[1].flags, set())
        self.assertEqual(entries[2].flags, set())

    def test_improvement_window(self):
        entries = [check_in(i, [4] * 8) for i in range(3)]
        result = trend_analyzer.analyze_trend(entries, RecordingStore())
        self.assertEqual(result.flags, {Flag.IMPROVEMENT})

    def test_mixed_window_is_consistent(self):
        entries = [check_in(0, [4] * 8), check_in(1, [2] * 8), check_in(2, [4] * 8)]
        result = trend_analyzer.analyze_trend(entries, RecordingStore())
        self.assertEqual(result.flags, {Flag.CONSISTENT})

    def test_reclassification_replaces_earlier_trend_flag(self):
        store = RecordingStore()
        entries = [
            check_in(0, [3] * 8, flags=[Flag.IMPROVEMENT, Flag.NEEDS_ATTENTION]),
            check_in(1, [4] * 8),
            check_in(2, [2] * 8),
        ]
        result = trend_analyzer.analyze_trend(entries, store)
        self.assertEqual(result.flags, {Flag.CONSISTENT, Flag.NEEDS_ATTENTION})
        self.assertEqual(store.updates, [("c0", {Flag.CONSISTENT, Flag.NEEDS_ATTENTION})])

    def test_repeated_analysis_keeps_one_trend_flag(self):
        entries = [check_in(i, [2] * 8) for i in range(3)]
        trend_analyzer.analyze_trend(entries, RecordingStore())
        result = trend_analyzer.analyze_trend(entries, RecordingStore())
        self.assertEqual(result.flags, {Flag.DECLINING})

    def test_only_three_newest_entries_count(self):
        entries = [check_in(i, [4] * 8) for i in range(3)] + [check_in(i, [1] * 8) for i in range(3, 7)]
        result = trend_analyzer.analyze_trend(entries, RecordingStore())
        self.assertEqual(result.flags, {Flag.IMPROVEMENT})

    def test_failed_write_propagates(self):
        entries = [check_in(i, [2] * 8) for i in range(3)]
        with self.assertRaises(StoreWriteError):
            trend_analyzer.analyze_trend(entries, RecordingStore(fail_writes=True))

    def test_trend_flag_for(self):
        entries = [check_in(i, [2] * 8) for i in range(3)]
        self.assertEqual(trend_analyzer.trend_flag_for(entries), Flag.DECLINING)
        self.assertIsNone(trend_analyzer.trend_flag_for(entries[:2]))
        self.assertEqual(trend_analyzer.window_averages(entries), [2.0, 2.0, 2.0])


if __name__ == "__main__":
    unittest.main()
