"""Desktop notification via the OSC 9 terminal escape (iTerm2, kitty, WezTerm, ...)."""

import logging
import sys
from typing import TextIO

logger = logging.getLogger(__name__)


class TerminalNotifier:
    def __init__(self, stream: TextIO | None = None, enabled: bool = True):
        self._stream = stream
        self.enabled = enabled

    def notify(self, message: str) -> None:
        if not self.enabled:
            return
        stream = self._stream or sys.stdout
        try:
            stream.write(f"\x1b]9;{message}\x1b\\")
            stream.flush()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not show notification: {e}")
