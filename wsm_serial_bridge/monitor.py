# wsm_serial_bridge/monitor.py

from typing import Optional, Tuple

from .exceptions import AlreadyMeasuringError
from .protocol import SPEED_RECEIVE_TIMEOUT_MS


class SpeedMonitor:
    """
    Speed freshness watchdog.

    A single-shot deadline on a monotonic clock. Every interval frame
    re-arms it; when it passes, speed data is considered stale until
    the next interval frame arrives.
    """

    def __init__(self, timeout_ms: int = SPEED_RECEIVE_TIMEOUT_MS):
        self.timeout = timeout_ms / 1000.0
        self._fresh = False
        self._deadline: Optional[float] = None

    def refresh(self, now: float) -> bool:
        """
        Re-arm the watchdog. Returns True when speed data was stale
        until now.
        """
        restored = not self._fresh
        self._fresh = True
        self._deadline = now + self.timeout
        return restored

    def expired(self, now: float) -> bool:
        """
        Returns True once per expiry of an armed deadline.
        """
        if self._deadline is None or now < self._deadline:
            return False

        self._deadline = None
        self._fresh = False
        return True

    def disarm(self):
        self._deadline = None
        self._fresh = False

    def is_fresh(self) -> bool:
        return self._fresh

    @property
    def armed(self) -> bool:
        return self._deadline is not None


class LongTermMeasurement:
    """
    Averages a fixed number of speed samples and reports the
    spread between the slowest and the fastest one.
    """

    def __init__(self):
        self.active = False
        self.target_count = 0
        self.count = 0
        self.total = 0.0
        self.min = 0.0
        self.max = 0.0

    def start(self, target_count: int):
        if self.active:
            raise AlreadyMeasuringError(
                "Long-term speed measurement is already running")
        if target_count < 1:
            raise ValueError("target_count must be at least 1")

        self.target_count = target_count
        self.count = 0
        self.total = 0.0
        self.active = True

    def record(self, speed: float) -> Optional[Tuple[float, float]]:
        """
        Add one sample. Returns (mean, diffusion) when the target
        count is reached, None otherwise.
        """
        if not self.active:
            return None

        self.count += 1
        self.total += speed

        if self.count == 1:
            self.min = self.max = speed
        else:
            self.min = min(self.min, speed)
            self.max = max(self.max, speed)

        if self.count < self.target_count:
            return None

        self.active = False
        return self.total / self.count, abs(self.min - self.max)

    def cancel(self):
        self.active = False
