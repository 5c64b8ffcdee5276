"""
callbridge/services/call_history.py
Call History Query Service.

NEVER-RAISE POLICY:
  Any host store failure (permission denial, store unavailable, cursor
  error) is captured as a HostFailure and downgraded to an empty list.
  Callers must treat [] as "no matching calls OR query failed".
"""

import logging
from typing import List

from callbridge.models.record import CallRecord
from callbridge.models.result import Outcome
from callbridge.stores.base import CallLogStore

logger = logging.getLogger(__name__)


class CallHistoryService:

    def __init__(self, store: CallLogStore):
        self.store = store

    def query(self, timestamp_ms: int) -> Outcome[List[CallRecord]]:
        """Run the store query; failures are returned, not raised."""
        return Outcome.of('call_log', lambda: self._fetch(timestamp_ms))

    def get_calls_since(self, timestamp_ms: int) -> List[CallRecord]:
        outcome = self.query(timestamp_ms)
        if not outcome.ok:
            logger.warning(
                f"Call log query failed ({self.store.name}): {outcome.failure.reason}, returning no calls"
            )
        return outcome.or_default([])

    def _fetch(self, timestamp_ms: int) -> List[CallRecord]:
        rows = [r for r in self.store.query_since(timestamp_ms) if r.timestamp_ms >= timestamp_ms]
        # Stores already order DESC; re-sorting is stable so ties keep store order
        rows.sort(key=lambda r: r.timestamp_ms, reverse=True)
        return rows
