"""
callbridge/services/launcher.py
App Launch Service: bring another installed application to the foreground.

Two named strategies, evaluated in order, first one that yields an
intent wins:

  1. DirectEntryPoint       the platform's default launch intent for the package
  2. SynthesizedMainIntent  ACTION_MAIN + CATEGORY_LAUNCHER scoped to the
                            package, NEW_TASK, only if something can handle it

A strategy returns the Intent to start, or None to pass to the next one.
The chosen intent is started exactly once. Every fault in resolution or
start is logged and reported as False; no retries.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from callbridge.models.record import LaunchRequest
from callbridge.models.result import Outcome
from callbridge.platform.base import (
    ACTION_MAIN,
    CATEGORY_LAUNCHER,
    FLAG_ACTIVITY_NEW_TASK,
    Intent,
    PackageManager,
)

logger = logging.getLogger(__name__)


class LaunchStrategy(ABC):
    name = 'base'

    @abstractmethod
    def resolve(self, pm: PackageManager, package: str) -> Optional[Intent]:
        """The intent to start for package, or None to pass to the next strategy."""
        ...


class DirectEntryPoint(LaunchStrategy):
    name = 'direct'

    def resolve(self, pm: PackageManager, package: str) -> Optional[Intent]:
        return pm.get_launch_intent(package)


class SynthesizedMainIntent(LaunchStrategy):
    name = 'synthesized'

    @staticmethod
    def build(package: str) -> Intent:
        return Intent(
            action     = ACTION_MAIN,
            package    = package,
            categories = (CATEGORY_LAUNCHER,),
        ).with_flags(FLAG_ACTIVITY_NEW_TASK)

    def resolve(self, pm: PackageManager, package: str) -> Optional[Intent]:
        intent = self.build(package)
        if not pm.query_intent_activities(intent):
            logger.info(f"No launcher activity handles {package}")
            return None
        return intent


DEFAULT_STRATEGIES = (DirectEntryPoint(), SynthesizedMainIntent())


class LaunchService:

    def __init__(
        self,
        package_manager: PackageManager,
        strategies:      Sequence[LaunchStrategy] = DEFAULT_STRATEGIES,
    ):
        self.pm         = package_manager
        self.strategies = tuple(strategies)

    def launch(self, request: LaunchRequest) -> Outcome[bool]:
        return Outcome.of('launcher', lambda: self._launch(request.application_id))

    def launch_app(self, application_id: str) -> bool:
        outcome = self.launch(LaunchRequest(application_id=application_id))
        if not outcome.ok:
            logger.error(f"Error launching app {application_id}: {outcome.failure.reason}")
        return outcome.or_default(False)

    def _launch(self, package: str) -> bool:
        for strategy in self.strategies:
            intent = strategy.resolve(self.pm, package)
            if intent is None:
                continue
            self.pm.start_activity(intent)
            logger.info(f"Launched {package} via {strategy.name} entry point")
            return True
        return False
