"""
Call recording: the before/after protocol wrapped around every instrumented
driver call.

``before()`` pushes a :class:`CallContext`, ``after()`` pops it, builds the
log scope and hands the rendered message to the configured sink when the
call's source passes the source filters. :func:`timed_call` runs a driver
method between the two and accounts its duration.
"""
import datetime
import json
from typing import Any  # noqa:F401
from typing import Callable  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Iterable  # noqa:F401
from typing import List  # noqa:F401
from typing import Optional  # noqa:F401
from typing import Sequence  # noqa:F401

import attr

from .benchmarks import BenchmarkStore  # noqa:F401
from .constants import QUERY
from .errors import StackUnderflowError
from .internal.logger import get_logger
from .internal.utils.time import StopWatch
from .internal.utils.time import Time
from .variables import Variable


log = get_logger(__name__)


@attr.s(slots=True)
class CallContext(object):
    timestamp = attr.ib(type=str)
    started_at = attr.ib(type=float)
    source = attr.ib(type=str)
    args = attr.ib(factory=list)  # type: List[Any]
    query = attr.ib(default=None, type=Optional[str])


def _encode_arg(o):
    if isinstance(o, Variable):
        return o.value
    if isinstance(o, (bytes, bytearray, memoryview)):
        return bytes(o).hex()
    if isinstance(o, (datetime.date, datetime.time)):
        return o.isoformat()
    if isinstance(o, (set, frozenset, tuple)):
        return list(o)
    return repr(o)


def encode_args(args):
    # type: (Sequence[Any]) -> str
    """Compact JSON list of call arguments, non-ASCII text kept as is."""
    return json.dumps(list(args), ensure_ascii=False, separators=(",", ":"), default=_encode_arg)


def render_log_message(template, scope):
    # type: (str, Dict[str, Any]) -> str
    """Replace every ``%NAME%`` of ``template`` by ``scope["NAME"]``; unknown placeholders are kept."""
    for name, value in scope.items():
        template = template.replace("%{}%".format(name), str(value))
    return template


def _text(value):
    return "" if value is None else str(value)


class CallRecorder(object):
    """LIFO stack of pending calls for one connection or statement.

    A disabled recorder (no options, or options without a logger) ignores
    ``before()`` and ``after()`` entirely.
    """

    def __init__(self, environment, hooks=None):
        self._environment = environment
        self._hooks = hooks if hooks is not None else environment.hooks
        self._stack = []  # type: List[CallContext]

    @property
    def enabled(self):
        # type: () -> bool
        return self._environment.logging_enabled

    @property
    def depth(self):
        # type: () -> int
        return len(self._stack)

    def before(self, source, args=(), exclude=None, query=None):
        # type: (str, Iterable[Any], Optional[Iterable[int]], Optional[str]) -> None
        """Push the context of a call that is about to run.

        :param source: the call site, ``"Connection::prepare"``
        :param args: the call arguments logged as ``%ARGS%``
        :param exclude: positions of ``args`` kept out of the log (passwords)
        :param query: the query logged as ``%QUERY%``; replaces ``args`` when not empty
        """
        if not self.enabled:
            return
        options = self._environment.options
        args = list(args)
        if exclude:
            excluded = set(exclude)
            args = [arg for position, arg in enumerate(args) if position not in excluded]
        timestamp = datetime.datetime.fromtimestamp(Time.time()).strftime(options.format.timestamp)
        if query:
            context = CallContext(timestamp, Time.monotonic(), source, query=query)
        else:
            context = CallContext(timestamp, Time.monotonic(), source, args=args)
        self._stack.append(context)

    def after(self):
        # type: () -> Optional[str]
        """Pop the innermost call and log it. Returns the logged message, if any."""
        if not self.enabled:
            return None
        try:
            call = self._stack.pop()
        except IndexError:
            raise StackUnderflowError("after() called without a matching before()") from None

        options = self._environment.options
        scope = self.build_scope(call, Time.monotonic() - call.started_at)
        if not options.should_log(call.source):
            return None

        template = options.format.query if call.query else options.format.call
        self._hooks._run_customize_scope(scope)
        message = render_log_message(template, scope)
        try:
            options.logger.log(message, scope)
        except Exception:
            log.error("Failed to send call log of %s to %r", call.source, options.logger, exc_info=True)
        return message

    def build_scope(self, call, elapsed):
        # type: (CallContext, float) -> Dict[str, str]
        options = self._environment.options
        scope = {
            "TIME_STAMP": call.timestamp,
            "DSN": _text(options.dsn),
            "USER_NAME": _text(options.username),
            "EXECUTION_TIME": options.format.precision % elapsed,
            "SOURCE": call.source,
        }
        if call.query:
            scope["QUERY"] = self._hooks._run_redact_query(call.query)
            scope["COUNT"] = options.format.count % self._environment.benchmarks[QUERY].count
        else:
            scope["ARGS"] = encode_args(call.args)
        return scope


def timed_call(
    recorder,  # type: Optional[CallRecorder]
    kind,  # type: str
    stores,  # type: Sequence[BenchmarkStore]
    method,  # type: Callable[..., Any]
    args=(),  # type: Sequence[Any]
    kwargs=None,  # type: Optional[Dict[str, Any]]
    count=True,  # type: bool
):
    # type: (...) -> Any
    """
    Call ``method`` and account its duration whether it returns or raises.

    The duration is added to ``kind`` (and ``total``) of every store in
    ``stores``, then the pending call pushed with ``recorder.before()`` is
    logged. Driver errors propagate unchanged once both are done.

    :param recorder: the recorder holding the pending call context, ``None`` for calls that are not logged
    :param kind: benchmark kind, also counted unless ``count`` is false (already counted up front)
    :param stores: benchmark stores to update, shared store first
    :param method: the wrapped driver callable, called with ``args`` and ``kwargs``
    """
    watch = StopWatch().start()
    try:
        return method(*args, **(kwargs or {}))
    finally:
        elapsed = watch.elapsed()
        for store in stores:
            if count:
                store.increment(kind, elapsed)
            else:
                store.add_time(kind, elapsed)
        if recorder is not None:
            recorder.after()
