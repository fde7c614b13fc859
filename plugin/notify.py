# =============================================================================
# VisualEyes Heatmap Client - Toast Notifications
# =============================================================================
# Short-lived user messages.  A toast is shown until it is dismissed or its
# display time (5 seconds by default) runs out.  The Notifier logs each
# toast and forwards it to an optional display callback (the CLI prints).
# =============================================================================

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Toast:
    message: str
    duration_seconds: float = 5.0
    created_at: float = field(default_factory=time.monotonic)
    dismissed: bool = False

    def dismiss(self) -> None:
        self.dismissed = True

    def is_visible(self, now: Optional[float] = None) -> bool:
        """A toast is visible until dismissed or past its display time."""
        if self.dismissed:
            return False
        now = time.monotonic() if now is None else now
        return now - self.created_at < self.duration_seconds


class Notifier:
    """
    Collects toasts for one session.

    Args:
        duration_seconds: Display time for every toast.
        display:          Callback invoked with each new Toast.
    """

    def __init__(
        self,
        duration_seconds: float = 5.0,
        display: Optional[Callable[[Toast], None]] = None,
    ):
        self._duration = duration_seconds
        self._display = display
        self.history: List[Toast] = []

    def toast(self, message: str) -> Toast:
        toast = Toast(message=message, duration_seconds=self._duration)
        self.history.append(toast)
        logger.info("Toast: %s", message)
        if self._display is not None:
            self._display(toast)
        return toast

    @property
    def messages(self) -> List[str]:
        return [t.message for t in self.history]
