"""
Per-operation benchmark counters.

A ``BenchmarkStore`` is owned by a connection and shared, by reference, with
every statement the connection produces. Each statement additionally keeps a
private store restricted to ``query``, ``fetch`` and ``total``.
"""
import threading
from types import MappingProxyType
from typing import Dict  # noqa:F401
from typing import Iterable  # noqa:F401
from typing import Mapping  # noqa:F401
from typing import Optional  # noqa:F401

import attr

from .constants import CONNECTION_KINDS
from .constants import STATEMENT_KINDS
from .constants import TOTAL
from .errors import UnknownOperationKindError


@attr.s(frozen=True, slots=True)
class BenchmarkEntry(object):
    """Read-only view of one benchmark kind. ``count`` is ``None`` for kinds that only track time."""

    time = attr.ib(type=float, default=0.0)
    count = attr.ib(type=Optional[int], default=None)

    def to_dict(self):
        # type: () -> Dict[str, float]
        if self.count is None:
            return {"time": self.time}
        return {"count": self.count, "time": self.time}


class BenchmarkStore(object):
    """Counters and cumulative times keyed by operation kind.

    The key set is fixed at construction. Every timed operation also adds its
    duration to ``total``; referencing a kind outside the key set raises
    :class:`UnknownOperationKindError`.
    """

    def __init__(self, kinds=CONNECTION_KINDS):
        # type: (Iterable[str]) -> None
        kinds = tuple(kinds)
        if TOTAL not in kinds:
            raise UnknownOperationKindError("benchmark kinds must include %r" % TOTAL)
        self._lock = threading.Lock()
        self._counts = {kind: 0 for kind in kinds if kind != TOTAL}  # type: Dict[str, int]
        self._times = {kind: 0.0 for kind in kinds}  # type: Dict[str, float]

    @classmethod
    def for_statement(cls):
        # type: () -> BenchmarkStore
        return cls(STATEMENT_KINDS)

    @property
    def kinds(self):
        return tuple(self._times)

    def _check(self, kind):
        if kind not in self._times:
            raise UnknownOperationKindError("unknown benchmark kind %r, expected one of %r" % (kind, self.kinds))

    def count(self, kind):
        # type: (str) -> None
        """Increment the counter of ``kind`` without touching any time."""
        self._check(kind)
        if kind not in self._counts:
            raise UnknownOperationKindError("benchmark kind %r has no counter" % kind)
        with self._lock:
            self._counts[kind] += 1

    def add_time(self, kind, elapsed):
        # type: (str, float) -> None
        """Add ``elapsed`` seconds to ``kind`` and to ``total``."""
        self._check(kind)
        with self._lock:
            self._times[kind] += elapsed
            if kind != TOTAL:
                self._times[TOTAL] += elapsed

    def increment(self, kind, elapsed):
        # type: (str, float) -> None
        """Count one operation of ``kind`` (when it has a counter) and add its duration."""
        self._check(kind)
        with self._lock:
            if kind in self._counts:
                self._counts[kind] += 1
            self._times[kind] += elapsed
            if kind != TOTAL:
                self._times[TOTAL] += elapsed

    def __getitem__(self, kind):
        # type: (str) -> BenchmarkEntry
        self._check(kind)
        with self._lock:
            return BenchmarkEntry(time=self._times[kind], count=self._counts.get(kind))

    def __contains__(self, kind):
        return kind in self._times

    def snapshot(self):
        # type: () -> Mapping[str, BenchmarkEntry]
        with self._lock:
            return MappingProxyType(
                {kind: BenchmarkEntry(time=time, count=self._counts.get(kind)) for kind, time in self._times.items()}
            )

    def to_dict(self):
        # type: () -> Dict[str, Dict[str, float]]
        return {kind: entry.to_dict() for kind, entry in self.snapshot().items()}

    def __repr__(self):
        return "{}({!r})".format(self.__class__.__name__, self.to_dict())
