"""
callbridge/dispatcher.py
Single entry point for every UI-process command.

  dispatch(channel_name, method, arguments) → MethodResult

Holds no state beyond the channel table. Never raises: unknown channels
and methods come back as not_implemented, bad arguments as INVALID_ARGUMENT,
handler faults as INTERNAL_ERROR.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping

from callbridge.channels import Channel
from callbridge.models.result import MethodCall, MethodResult

logger = logging.getLogger(__name__)


class Dispatcher:

    def __init__(self, channels: Iterable[Channel]):
        self._channels: Dict[str, Channel] = {c.name: c for c in channels}

    @property
    def channel_names(self) -> List[str]:
        return list(self._channels)

    def dispatch(
        self,
        channel_name: str,
        method:       str,
        arguments:    Any = None,
    ) -> MethodResult:
        channel = self._channels.get(channel_name)
        if channel is None:
            logger.warning(f"No channel registered as {channel_name!r}")
            return MethodResult.not_implemented()

        if arguments is None:
            arguments = {}
        if isinstance(arguments, Mapping):
            arguments = dict(arguments)

        return channel.handle(MethodCall(method=method, arguments=arguments))
