"""
callbridge/stores/base.py
Abstract base class for host call-log stores.
To add a new backend: subclass CallLogStore and implement query_since().
"""

from abc import ABC, abstractmethod
from typing import Iterable

from callbridge.models.record import CallRecord


class CallLogStore(ABC):
    """
    Read-only, timestamp-indexed view of the host call history.
    The call history service never knows which backend is running.
    """

    name: str = 'call_log'

    @abstractmethod
    def query_since(self, timestamp_ms: int) -> Iterable[CallRecord]:
        """
        Return records with timestamp_ms >= the given value, newest first.
        MAY raise on any host fault (permission, missing store, bad cursor);
        the service layer owns the never-raise policy.
        """
        ...
