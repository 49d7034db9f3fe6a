#!/usr/bin/env python3
"""
Reconciles freshly fetched purity rates with the snapshot store.
Rotates the store only on real price changes and falls back to the last
stored snapshot when the upstream source is unavailable.
"""

import logging
from typing import Optional, Sequence

from goldrate_tracker.constants import TRIGGER_MANUAL
from goldrate_tracker.exceptions import (
    FetchError,
    NoDataAvailableError,
    ValidationError,
)
from goldrate_tracker.fetchers.base import BaseFetcher
from goldrate_tracker.models import RateEntry, ReconciliationResult, Snapshot
from goldrate_tracker.services.snapshot_store import SnapshotStore
from goldrate_tracker.utils.comparison import unique_by_code

logger = logging.getLogger(__name__)


class Reconciler:
    """Decides whether fetched rates replace the stored current snapshot."""

    def __init__(self, store: SnapshotStore, fetcher: Optional[BaseFetcher] = None):
        """
        Args:
            store: Snapshot store to reconcile against
            fetcher: Upstream fetcher used by refresh(); optional when only
                reconcile() is called with already fetched entries
        """
        self.store = store
        self.fetcher = fetcher

    def reconcile(self, fetched_entries: Sequence[RateEntry]) -> ReconciliationResult:
        """
        Compare fetched entries with the store and rotate on change.

        Args:
            fetched_entries: Validated entries from the upstream source; a
                repeated code keeps its first occurrence

        Returns:
            ReconciliationResult reflecting the store after the check

        Raises:
            ValidationError: If no entries are given
            StorageError: If the rotation could not be persisted
        """
        entries = unique_by_code(fetched_entries)
        if not entries:
            raise ValidationError("Cannot reconcile an empty rate list")

        outcome = self.store.rotate_and_store(entries)
        result = self._build_result(outcome.current, outcome.previous)
        result.rotated = outcome.rotated
        return result

    def refresh(self, trigger: str = TRIGGER_MANUAL) -> ReconciliationResult:
        """
        Fetch upstream rates and reconcile them.

        A failed fetch returns the stored snapshots with ``error`` set.

        Args:
            trigger: What caused the refresh (for logging)

        Returns:
            ReconciliationResult

        Raises:
            NoDataAvailableError: If the fetch failed and nothing is stored
            StorageError: If the rotation could not be persisted
        """
        if self.fetcher is None:
            raise FetchError("No fetcher configured for refresh")

        logger.info("Refreshing rates (trigger: %s)", trigger)

        try:
            entries = self.fetcher.fetch_rates()
        except (FetchError, ValidationError) as e:
            logger.warning("Refresh failed (%s), serving stored snapshot: %s", trigger, e)
            return self.cached_result(error=str(e))

        return self.reconcile(entries)

    def cached_result(self, error: Optional[str] = None) -> ReconciliationResult:
        """
        Build a result from the store without fetching.

        Args:
            error: Failure indicator to attach to the result

        Raises:
            NoDataAvailableError: If the store holds no snapshot
        """
        current, previous = self.store.read_pair()
        return self._build_result(current, previous, error)

    @staticmethod
    def _build_result(
        current: Optional[Snapshot],
        previous: Optional[Snapshot],
        error: Optional[str] = None
    ) -> ReconciliationResult:
        if current is None:
            raise NoDataAvailableError(
                f"No data available: {error}" if error else "No data available"
            )

        return ReconciliationResult(
            current=list(current.entries),
            previous=list(previous.entries) if previous else [],
            last_updated=current.captured_at,
            previous_updated=previous.captured_at if previous else None,
            error=error,
        )
