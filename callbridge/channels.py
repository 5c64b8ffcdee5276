"""
callbridge/channels.py
The three command channels and their fixed vocabularies.

Every method→handler mapping is explicit; adding a command means editing
build_channels(). Arguments are validated with strict pydantic models
before a handler runs; a handler never sees an invalid argument bag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from callbridge.models.result import (
    INTERNAL_ERROR,
    INVALID_ARGUMENT,
    MethodCall,
    MethodResult,
)
from callbridge.services.call_history import CallHistoryService
from callbridge.services.launcher import LaunchService
from callbridge.services.share_cell import ShareCapture

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_PREFIX = 'com.example.calllog'

CALL_LOG_CHANNEL = 'call_log'
SHARE_CHANNEL    = 'share'
LAUNCHER_CHANNEL = 'launcher'

INT64_MAX = 2**63 - 1


# ── ARGUMENT MODELS ───────────────────────────────────────────────────────

class CallsSinceArgs(BaseModel):
    model_config = ConfigDict(strict=True)

    timestamp: int = Field(ge=0, le=INT64_MAX, description='Milliseconds since epoch, inclusive lower bound')


class LaunchAppArgs(BaseModel):
    model_config = ConfigDict(strict=True)

    packageName: str = Field(min_length=1, description='Application id, e.g. com.android.chrome')


# Human-readable message per required field when it is absent
REQUIRED_MESSAGES = {
    'timestamp':   'Timestamp is required',
    'packageName': 'Package name is required',
}


def _describe(exc: ValidationError) -> str:
    errors = exc.errors()
    for err in errors:
        field = err['loc'][0] if err['loc'] else ''
        if err['type'] == 'missing' and field in REQUIRED_MESSAGES:
            return REQUIRED_MESSAGES[field]
    first = errors[0]
    where = '.'.join(str(p) for p in first['loc'])
    return f"{where}: {first['msg']}" if where else first['msg']


# ── CHANNEL ───────────────────────────────────────────────────────────────

@dataclass
class Command:
    handler:     Callable[..., Any]
    args_model:  Optional[Type[BaseModel]] = None


class Channel:
    """One namespace of commands. Unknown methods are not implemented, not errors."""

    def __init__(self, name: str, commands: Dict[str, Command]):
        self.name     = name
        self.commands = commands

    def handle(self, call: MethodCall) -> MethodResult:
        command = self.commands.get(call.method)
        if command is None:
            logger.info(f"{self.name}: no handler for {call.method!r}")
            return MethodResult.not_implemented()

        args = None
        if command.args_model is not None:
            if not isinstance(call.arguments, Mapping):
                logger.info(f"{self.name}.{call.method}: arguments are not a map")
                return MethodResult.error(INVALID_ARGUMENT, "Arguments must be a map")
            try:
                args = command.args_model.model_validate(call.arguments)
            except ValidationError as exc:
                message = _describe(exc)
                logger.info(f"{self.name}.{call.method}: invalid arguments: {message}")
                return MethodResult.error(INVALID_ARGUMENT, message)

        try:
            result = command.handler(args) if command.args_model else command.handler()
        except Exception as exc:
            logger.error(f"{self.name}.{call.method} failed: {exc}", exc_info=True)
            return MethodResult.error(INTERNAL_ERROR, str(exc) or type(exc).__name__)
        return MethodResult.success(result)


def build_channels(
    history:  CallHistoryService,
    share:    ShareCapture,
    launcher: LaunchService,
    prefix:   str = DEFAULT_CHANNEL_PREFIX,
) -> List[Channel]:

    def get_calls_since(args: CallsSinceArgs) -> List[Dict[str, Any]]:
        return [c.to_wire() for c in history.get_calls_since(args.timestamp)]

    def get_shared_text() -> Optional[str]:
        return share.take_shared_text()

    def launch_app(args: LaunchAppArgs) -> bool:
        return launcher.launch_app(args.packageName)

    return [
        Channel(f"{prefix}/{CALL_LOG_CHANNEL}", {
            'getCallsSince': Command(get_calls_since, CallsSinceArgs),
        }),
        Channel(f"{prefix}/{SHARE_CHANNEL}", {
            'getSharedText': Command(get_shared_text),
        }),
        Channel(f"{prefix}/{LAUNCHER_CHANNEL}", {
            'launchApp': Command(launch_app, LaunchAppArgs),
        }),
    ]
