"""Rate limiting for forced key-set refreshes.

An unknown ``kid`` forces a key-set refresh so legitimate key rotation is
picked up immediately. Without a limit, a client sending random ``kid`` values
turns every request into an outbound JWKS fetch. RefreshGate allows at most
one forced refresh per configured interval and counts the denials.
"""

from __future__ import annotations

import threading
import time
from typing import Final

import structlog

logger = structlog.get_logger(__name__)

_DEFAULT_INTERVAL: Final[float] = 10
"""Default minimum interval between refreshes in seconds."""

_DEFAULT_ALERT_THRESHOLD: Final[int] = 5
"""Default number of denials (per interval) before a warning is logged."""


class RefreshGate:
    """Thread-safe rate limiter for forced key-set refreshes.

    Thread Safety:
        All operations are protected by an internal lock.

    Attributes:
        _min_interval: Minimum seconds between allowed refreshes.
        _alert_threshold: Number of denials before a warning is logged.
        _lock: Thread synchronization lock.
        _next_allowed_at: Unix timestamp when next refresh is allowed.
        _denied: Count of denied attempts since last allow.
    """

    def __init__(
        self,
        min_interval: float = _DEFAULT_INTERVAL,
        alert_threshold: int = _DEFAULT_ALERT_THRESHOLD,
    ) -> None:
        """Initialize the refresh gate.

        Args:
            min_interval: Minimum seconds between allowed refreshes.
            alert_threshold: Number of denied attempts before warning.

        Raises:
            ValueError: If min_interval or alert_threshold are invalid.
        """
        if min_interval <= 0:
            raise ValueError(f"min_interval must be positive, got {min_interval}")
        if alert_threshold < 1:
            raise ValueError(f"alert_threshold must be at least 1, got {alert_threshold}")

        self._min_interval = min_interval
        self._alert_threshold = alert_threshold

        self._lock = threading.Lock()
        self._next_allowed_at: float = 0.0
        self._denied: int = 0

    @property
    def denied(self) -> int:
        """Denials since the last allowed refresh."""
        return self._denied

    def allow(self) -> bool:
        """Check if a refresh operation is allowed now.

        Returns:
            True if refresh is allowed (and the interval restarts).
            False if refresh is denied (too soon since last refresh).
        """
        now = time.time()

        with self._lock:
            if now < self._next_allowed_at:
                self._denied += 1
                if self._denied == self._alert_threshold:
                    logger.warning(
                        "jwks.refresh_throttled",
                        denied=self._denied,
                        retry_in=round(self._next_allowed_at - now, 3),
                    )
                return False

            self._next_allowed_at = now + self._min_interval
            self._denied = 0
            return True
