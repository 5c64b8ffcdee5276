"""
callbridge/models/result.py
Result types crossing the bridge boundary.

MethodCall / MethodResult are the wire-level request and response of one
dispatched command. Outcome / HostFailure are internal: services wrap host
store and launcher calls in an Outcome, and the service boundary downgrades
a failed Outcome to the documented benign value ([] or False).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar('T')

STATUS_SUCCESS          = 'success'
STATUS_ERROR            = 'error'
STATUS_NOT_IMPLEMENTED  = 'not_implemented'

INVALID_ARGUMENT  = 'INVALID_ARGUMENT'
INTERNAL_ERROR    = 'INTERNAL_ERROR'


@dataclass
class MethodCall:
    method:     str
    arguments:  Any            = field(default_factory=dict)   # must be a map for commands that take arguments


@dataclass
class MethodResult:
    """One of: success(result), error(code, message), not_implemented()."""
    status:   str
    result:   Any           = None
    code:     Optional[str] = None
    message:  Optional[str] = None
    details:  Any           = None

    @classmethod
    def success(cls, result: Any = None) -> 'MethodResult':
        return cls(status=STATUS_SUCCESS, result=result)

    @classmethod
    def error(cls, code: str, message: str, details: Any = None) -> 'MethodResult':
        return cls(status=STATUS_ERROR, code=code, message=message, details=details)

    @classmethod
    def not_implemented(cls) -> 'MethodResult':
        return cls(status=STATUS_NOT_IMPLEMENTED)

    @property
    def is_success(self) -> bool:
        return self.status == STATUS_SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == STATUS_ERROR

    @property
    def is_not_implemented(self) -> bool:
        return self.status == STATUS_NOT_IMPLEMENTED

    def to_dict(self) -> Dict[str, Any]:
        if self.is_success:
            return {'status': self.status, 'result': self.result}
        if self.is_error:
            return {
                'status':  self.status,
                'code':    self.code,
                'message': self.message,
                'details': self.details,
            }
        return {'status': self.status}


@dataclass(frozen=True)
class HostFailure:
    """A host store / launcher fault. Never leaves the service that caught it."""
    source:  str        # e.g. 'call_log', 'launcher'
    reason:  str
    error:   Optional[BaseException] = None


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value:    Optional[T]           = None
    failure:  Optional[HostFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def of(cls, source: str, fn: Callable[[], T]) -> 'Outcome[T]':
        """Run fn and capture any exception as a HostFailure."""
        try:
            return cls(value=fn())
        except Exception as e:
            return cls(failure=HostFailure(source=source, reason=str(e) or type(e).__name__, error=e))

    def or_default(self, default: T) -> T:
        return self.value if self.ok else default
