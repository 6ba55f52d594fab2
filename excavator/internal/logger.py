"""
Logging utilities for internal use.

Usage::

    from excavator.internal.logger import get_logger

    log = get_logger(__name__)
    log.debug("resolved driver %r for dsn %r", name, dsn)

Internal diagnostics never go through the call-logging sink configured on a
connection; they are plain ``logging`` records under the ``excavator`` logger.

Records are rate limited per call site (pathname/lineno): one record every
``EXCAVATOR_LOGGING_RATE`` seconds (default 60, ``0`` disables the limit).
Loggers set to ``DEBUG`` are never limited.
"""

import collections
import logging
import os
import time
from typing import DefaultDict
from typing import Tuple


SECOND = 1
MINUTE = 60 * SECOND


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve or create a ``Logger`` instance with consistent behavior for internal use.

    Configure all loggers with a rate limiter filter to prevent excessive logging.
    """
    logger = logging.getLogger(name)
    # addFilter will only add the filter if it is not already present
    logger.addFilter(log_filter)
    logger.propagate = True
    return logger


# Class used for keeping track of a log lines current time bucket and the number of log lines skipped
class LoggingBucket:
    def __init__(self, bucket: float, skipped: int):
        self.bucket = bucket
        self.skipped = skipped

    def __repr__(self):
        return f"LoggingBucket({self.bucket}, {self.skipped})"

    def is_sampled(self, record: logging.LogRecord, rate: float) -> bool:
        current = time.monotonic()
        if current - self.bucket >= rate:
            self.bucket = current
            record.skipped = self.skipped
            self.skipped = 0
            return True
        self.skipped += 1
        return False


_MINF = float("-inf")

_buckets: DefaultDict[Tuple[str, int], LoggingBucket] = collections.defaultdict(lambda: LoggingBucket(_MINF, 0))

_rate_limit = int(os.getenv("EXCAVATOR_LOGGING_RATE", default=MINUTE))


def log_filter(record: logging.LogRecord) -> bool:
    """
    Function used to determine if a log record should be outputted or not (True = output, False = skip).
    """
    logger = logging.getLogger(record.name)
    if not _rate_limit or logger.getEffectiveLevel() == logging.DEBUG:
        return True
    return _buckets[(record.pathname, record.lineno)].is_sampled(record, _rate_limit)


# library logger: stay silent unless the application configures logging
root_logger = logging.getLogger("excavator")
root_logger.addHandler(logging.NullHandler())
