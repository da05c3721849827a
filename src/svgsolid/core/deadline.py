"""Per-request processing deadline."""

import time

from svgsolid.exceptions import ProcessingTimeoutError


class Deadline:
    """A point in monotonic time after which processing must stop.

    Long-running stages call :meth:`check` before every expensive kernel
    operation. A deadline without a timeout never expires.

    Attributes:
        timeout: Allowed seconds, or None for no limit
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    @classmethod
    def never(cls) -> "Deadline":
        return cls(None)

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, stage: str) -> None:
        """Raise if the deadline has passed.

        Args:
            stage: Name of the stage about to run, used in the error

        Raises:
            ProcessingTimeoutError: If the deadline has passed
        """
        if self.expired:
            assert self.timeout is not None
            raise ProcessingTimeoutError(stage, self.timeout)
