"""
callbridge/models/record.py
Shared dataclass schema. Stores, services and the dispatcher
use these types. Do not add logic here, data only.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


ACTION_SEND      = 'android.intent.action.SEND'
MIME_TEXT_PLAIN  = 'text/plain'

# Android CallLog.Calls.TYPE, transported as the raw integer
CALL_TYPE_NAMES = {
    1: 'Incoming', 2: 'Outgoing', 3: 'Missed',
    4: 'Voicemail', 5: 'Rejected', 6: 'Blocked',
    7: 'Answered Externally',
}


@dataclass(frozen=True)
class CallRecord:
    """One row of the host call log."""
    number:        str
    timestamp_ms:  int
    call_type:     int          # see CALL_TYPE_NAMES
    duration_sec:  int

    def to_wire(self) -> Dict[str, Any]:
        return {
            'number':   self.number,
            'date':     self.timestamp_ms,
            'type':     self.call_type,
            'duration': self.duration_sec,
        }


@dataclass(frozen=True)
class LaunchRequest:
    application_id: str


@dataclass(frozen=True)
class Activation:
    """
    An inbound activation of the process: first start, a new
    activation while running, or the process coming back to the foreground.
    """
    action:     str
    mime_type:  Optional[str] = None
    text:       Optional[str] = None

    @property
    def is_text_share(self) -> bool:
        return self.action == ACTION_SEND and self.mime_type == MIME_TEXT_PLAIN
