"""
callbridge/services/share_cell.py
Share Capture Cell: a consume-once slot for text handed to the process
by an external "share" action.

ShareCell is the slot itself: last write wins, take() swaps the value out
under a lock so two readers can never both see the same text.

ShareCapture wires the slot to inbound activations. The most recent
activation is re-checked on every foreground transition, not only at start.
Shared text is never logged, only its length.
"""

import logging
import threading
from typing import Optional

from callbridge.models.record import Activation

logger = logging.getLogger(__name__)


class ShareCell:

    def __init__(self) -> None:
        self._lock  = threading.Lock()
        self._value: Optional[str] = None

    def put(self, text: Optional[str]) -> None:
        with self._lock:
            self._value = text

    def take(self) -> Optional[str]:
        with self._lock:
            value, self._value = self._value, None
        return value

    def peek(self) -> Optional[str]:
        with self._lock:
            return self._value

    def reset(self) -> None:
        self.put(None)


class ShareCapture:

    def __init__(self, cell: Optional[ShareCell] = None):
        self.cell = cell if cell is not None else ShareCell()
        self._last_activation: Optional[Activation] = None

    def on_external_share(self, text: Optional[str]) -> None:
        """Overwrite the pending text unconditionally."""
        logger.debug(f"External share received ({len(text or '')} chars)")
        self.cell.put(text)

    def take_shared_text(self) -> Optional[str]:
        return self.cell.take()

    def on_new_activation(self, activation: Activation) -> None:
        """The process was started or re-activated with a new activation."""
        self._last_activation = activation
        self._handle(activation)

    def on_foreground(self) -> None:
        """The process became the active foreground process again."""
        if self._last_activation is not None:
            self._handle(self._last_activation)

    def _handle(self, activation: Activation) -> None:
        if activation.is_text_share:
            self.on_external_share(activation.text)
