"""
Tests for the sync status coordinator.
"""

import unittest
from datetime import datetime, timezone

from coursereader.application.sync_status import SyncStatusTracker
from coursereader.domain.sync_types import SyncPhase, SyncReport


class TestSyncStatusTracker(unittest.TestCase):
    def setUp(self):
        self.tracker = SyncStatusTracker()

    def test_starts_idle(self):
        self.assertIs(self.tracker.status.phase, SyncPhase.IDLE)
        self.assertIsNone(self.tracker.status.last_report)

    def test_lifecycle(self):
        self.tracker.begin()
        self.assertTrue(self.tracker.status.syncing)

        report = SyncReport(timestamp=datetime.now(timezone.utc), new_courses_imported=1)
        self.tracker.settle(report)

        status = self.tracker.status
        self.assertIs(status.phase, SyncPhase.SETTLED)
        self.assertIs(status.last_report, report)
        self.assertEqual(status.last_synced, report.timestamp)

    def test_failed_sync_keeps_last_successful_time(self):
        first = SyncReport(timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc))
        self.tracker.settle(first)
        failed = SyncReport(timestamp=datetime(2025, 1, 2, tzinfo=timezone.utc), error="down")
        self.tracker.settle(failed)

        self.assertIs(self.tracker.status.last_report, failed)
        self.assertEqual(self.tracker.status.last_synced, first.timestamp)

    def test_begin_keeps_previous_report_visible(self):
        report = SyncReport(timestamp=datetime.now(timezone.utc))
        self.tracker.settle(report)
        self.tracker.begin()
        self.assertIs(self.tracker.status.last_report, report)

    def test_subscribers_receive_snapshots(self):
        seen = []
        unsubscribe = self.tracker.subscribe(seen.append)
        self.tracker.begin()
        unsubscribe()
        self.tracker.settle(SyncReport(timestamp=datetime.now(timezone.utc)))

        self.assertEqual([s.phase for s in seen], [SyncPhase.SYNCING])

    def test_failing_subscriber_is_ignored(self):
        def broken(_status):
            raise RuntimeError("bug")

        seen = []
        self.tracker.subscribe(broken)
        self.tracker.subscribe(seen.append)
        self.tracker.begin()
        self.assertEqual(len(seen), 1)


if __name__ == "__main__":
    unittest.main()
