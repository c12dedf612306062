"""Request pacing for outbound Are.na API calls.

All network traffic goes through a single ``RateGate`` so that no two
requests are sent closer together than the configured minimum spacing,
whichever component issues them.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Minimum spacing between two requests, in seconds
DEFAULT_MIN_INTERVAL = 0.2


class RateGate:
    """Serializes callers with a fixed minimum interval between grants."""

    def __init__(self, min_interval: float = DEFAULT_MIN_INTERVAL) -> None:
        """Initialize the gate.

        Args:
            min_interval: Minimum number of seconds between two grants
        """
        self.min_interval = max(0.0, min_interval)
        self.logger = logging.getLogger(self.__class__.__name__)
        self._last_send: Optional[float] = None
        # asyncio.Lock wakes waiters in FIFO order
        self._lock = asyncio.Lock()
        self._grants = 0
        self._total_wait = 0.0

    @property
    def last_send(self) -> Optional[float]:
        """Monotonic time of the last grant, or None before the first one."""
        return self._last_send

    async def acquire(self) -> float:
        """Wait until the next request may be sent.

        Returns:
            Time waited in seconds
        """
        async with self._lock:
            waited = 0.0
            if self._last_send is not None:
                elapsed = time.monotonic() - self._last_send
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    await asyncio.sleep(waited)

            self._last_send = time.monotonic()
            self._grants += 1
            self._total_wait += waited

            if waited > 0:
                self.logger.debug("Paced request: waited %.3fs", waited)
            return waited

    def reset(self) -> None:
        """Forget the last send time and statistics."""
        self._last_send = None
        self._grants = 0
        self._total_wait = 0.0

    @property
    def stats(self) -> Dict[str, float]:
        """Get pacing statistics."""
        return {
            "grants": self._grants,
            "total_wait_seconds": round(self._total_wait, 3),
            "avg_wait_seconds": round(self._total_wait / self._grants, 3) if self._grants else 0,
        }


# Global gate instance
_rate_gate: Optional[RateGate] = None


def get_rate_gate() -> RateGate:
    """Get or create the process-wide rate gate."""
    global _rate_gate
    if _rate_gate is None:
        _rate_gate = RateGate()
    return _rate_gate


def set_rate_gate(gate: RateGate) -> None:
    """Replace the process-wide rate gate."""
    global _rate_gate
    _rate_gate = gate
