"""
Sync status coordinator.

Owns the process-wide sync lifecycle (idle -> syncing -> settled) and hands
out read-only snapshots. Consumers read `status` or subscribe for updates
instead of sharing mutable state.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from coursereader.domain.sync_types import SyncPhase, SyncReport, SyncStatus

logger = logging.getLogger(__name__)

StatusListener = Callable[[SyncStatus], None]


class SyncStatusTracker:
    """Single owner of the current SyncStatus."""

    def __init__(self) -> None:
        self._status = SyncStatus()
        self._listeners: list[StatusListener] = []
        self._lock = threading.Lock()

    @property
    def status(self) -> SyncStatus:
        return self._status

    def begin(self) -> SyncStatus:
        """Enter the syncing phase, keeping the last settled report visible."""
        with self._lock:
            self._status = SyncStatus(
                phase=SyncPhase.SYNCING,
                last_report=self._status.last_report,
                last_synced=self._status.last_synced,
            )
            snapshot = self._status
        self._publish(snapshot)
        return snapshot

    def settle(self, report: SyncReport) -> SyncStatus:
        """Record a finished sync. Skipped calls never reach here."""
        with self._lock:
            last_synced = report.timestamp if report.ok else self._status.last_synced
            self._status = SyncStatus(
                phase=SyncPhase.SETTLED,
                last_report=report,
                last_synced=last_synced,
            )
            snapshot = self._status
        self._publish(snapshot)
        return snapshot

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """
        Register a listener for new snapshots.

        Returns:
            Callable that removes the subscription
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: SyncStatus) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning("Sync status listener failed: %s", e)

