"""
callbridge/platform/base.py
Abstract application resolution / launch facility of the host platform.
To add a new backend: subclass PackageManager and implement all three methods.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

ACTION_MAIN            = 'android.intent.action.MAIN'
CATEGORY_LAUNCHER      = 'android.intent.category.LAUNCHER'
FLAG_ACTIVITY_NEW_TASK = 0x10000000


@dataclass(frozen=True)
class Intent:
    """A launch request the platform can resolve and start."""
    action:      Optional[str]   = None
    package:     Optional[str]   = None
    component:   Optional[str]   = None     # "pkg/.Activity"
    categories:  Tuple[str, ...] = field(default_factory=tuple)
    flags:       int             = 0

    def with_flags(self, flags: int) -> 'Intent':
        return replace(self, flags=self.flags | flags)


class PackageManager(ABC):

    @abstractmethod
    def get_launch_intent(self, package: str) -> Optional[Intent]:
        """The platform's default launch entry point for package, or None."""
        ...

    @abstractmethod
    def query_intent_activities(self, intent: Intent) -> List[str]:
        """Components able to handle intent. Empty when nothing matches."""
        ...

    @abstractmethod
    def start_activity(self, intent: Intent) -> None:
        """Start intent. Raises on any platform failure."""
        ...
