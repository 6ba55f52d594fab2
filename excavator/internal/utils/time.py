import time as builtin_time
from typing import Optional


class Time:
    """
    References to the standard Python time functions that won't be clobbered by `freezegun`.

    Benchmarks are measured with ``monotonic``; log time stamps use ``time``.
    """

    time = builtin_time.time
    monotonic = builtin_time.monotonic


class StopWatch(object):
    """Measures the duration of a single instrumented call.

    Not thread-safe; every instrumented call owns its own watch.
    """

    def __init__(self) -> None:
        self._started_at: Optional[float] = None

    def start(self):
        # type: () -> StopWatch
        """Starts the watch."""
        self._started_at = Time.monotonic()
        return self

    def elapsed(self) -> float:
        """Get how many seconds have elapsed since :meth:`start`.

        :return: Number of seconds elapsed
        :rtype: float
        """
        if self._started_at is None:
            raise RuntimeError("Can not get the elapsed time of a stopwatch if it has not been started")
        return Time.monotonic() - self._started_at
