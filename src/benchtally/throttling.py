import time
import logging

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL_S = 10.0


class ProgressThrottle:
    """
    Suppresses repeated progress lines for the same (section, step) pair.

    A pair seen for the first time always passes; a repeat passes once
    ``interval_s`` has elapsed since the last emitted line.
    """

    def __init__(self, interval_s: float = PROGRESS_INTERVAL_S, clock=time.monotonic) -> None:
        self.interval_s = interval_s
        self._clock = clock
        self._last_key: tuple[str, str] | None = None
        self._last_time = 0.0

    def allow(self, section: str, step: str) -> bool:
        now = self._clock()
        key = (section, step)
        if key == self._last_key and now - self._last_time < self.interval_s:
            logger.debug(f"Suppressed progress for [{section}][{step}]")
            return False
        self._last_key = key
        self._last_time = now
        return True
