"""
Clock and retry policy used to pace register access.
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class Clock(ABC):
    """Source of time and blocking waits."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current local time."""
        pass

    @abstractmethod
    def wait(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        pass


class SystemClock(Clock):
    """Wall clock backed by :func:`time.sleep`."""

    def now(self) -> datetime:
        return datetime.now()

    def wait(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts a failing step gets.

    max_attempts of None retries forever.
    """

    max_attempts: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def allows(self, attempt: int) -> bool:
        """Return True if attempt number ``attempt`` (1-based) may run."""
        return self.max_attempts is None or attempt <= self.max_attempts
