"""
Instrumented DB-API connections.

:func:`connect` opens a driver connection from a DSN and wraps it in a
:class:`ConnectionProxy`; :meth:`ConnectionProxy.wrap` instruments a
connection that is already open::

    from excavator import LoggingSink, connect

    conn = connect(
        "sqlite::memory:",
        options={"debug": {"logger": LoggingSink(), "sources": ["/^Statement::/"]}},
    )
    stmt = conn.prepare("SELECT ? + ?")
    stmt.execute([1, 2])
    stmt.fetch_column()

Every intercepted call is timed, accounted in the connection's benchmark
store and, when a logger is configured, logged once it returns or raises.
"""
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Mapping  # noqa:F401
from typing import Optional  # noqa:F401
from typing import Tuple  # noqa:F401

import wrapt

from . import drivers
from .constants import ATTR_DEBUG
from .constants import ATTR_FETCH_MODE
from .constants import COMMIT
from .constants import PREPARE
from .constants import QUERY
from .constants import ROLLBACK
from .constants import SOURCE_CONNECTION
from .constants import TOTAL
from .constants import FetchMode
from .constants import ParamType
from .environment import DebuggingEnvironment
from .ext import sql
from .fetch import resolve_fetch_mode
from .internal.logger import get_logger
from .recorder import CallRecorder
from .recorder import timed_call
from .settings.config import config
from .settings.options import DebuggingOptions


log = get_logger(__name__)

# positions of the password and the driver options in the Connection::connect arguments
_CONNECT_EXCLUDED_ARGS = (2, 3)


class ConnectionProxy(wrapt.ObjectProxy):
    """ConnectionProxy wraps a DB-API connection with timing and call logging.

    Attributes that are not intercepted (``cursor``, ``close``,
    ``isolation_level``, ...) are those of the wrapped connection.
    """

    _excavator_source = SOURCE_CONNECTION

    def __init__(self, conn, environment=None, fetch_mode=FetchMode.TUPLE, vendor=None):
        super(ConnectionProxy, self).__init__(conn)
        if environment is None:
            environment = DebuggingEnvironment()
        self._self__excavator_environment = environment
        self._self_recorder = CallRecorder(environment)
        self._self_vendor = vendor or _get_vendor(conn)
        self._self_fetch_style = resolve_fetch_mode(fetch_mode or FetchMode.TUPLE)

    @classmethod
    def wrap(cls, conn, debug=None, dsn=None, username=None, hooks=None, fetch_mode=FetchMode.TUPLE):
        """Instrument an already open DB-API connection.

        ``debug`` is the debugging option bag; without one the connection is
        fully disabled and every call goes straight to the driver.
        """
        options = None
        if debug is not None and config.enabled:
            options = DebuggingOptions.create(debug, dsn=dsn, username=username)
        environment = DebuggingEnvironment(options=options, hooks=hooks)
        return cls(conn, environment, fetch_mode)

    def __repr__(self):
        return "<{} {} wrapping {!r}>".format(type(self).__name__, self._self_vendor, self.__wrapped__)

    @property
    def debugging_environment(self):
        # type: () -> DebuggingEnvironment
        return self._self__excavator_environment

    @property
    def default_fetch_style(self):
        return self._self_fetch_style

    @property
    def vendor(self):
        # type: () -> str
        return self._self_vendor

    def benchmarks(self):
        """Snapshot of the benchmarks shared by this connection and its statements."""
        return self._self__excavator_environment.benchmarks.snapshot()

    def _source(self, method):
        return "{}::{}".format(self._excavator_source, method)

    def _trace_method(self, method, kind, source, args=(), query=None, call_args=()):
        environment = self._self__excavator_environment
        if not environment.enabled:
            return method(*call_args)
        self._self_recorder.before(self._source(source), args, query=query)
        return timed_call(self._self_recorder, kind, (environment.benchmarks,), method, call_args)

    def _prepare(self, driver_options):
        return self.__wrapped__.cursor(**(driver_options or {}))

    def prepare(self, query, driver_options=None):
        """Create a statement for ``query``; ``driver_options`` are passed to ``cursor()``."""
        args = (query,) if driver_options is None else (query, driver_options)
        cursor = self._trace_method(self._prepare, PREPARE, "prepare", args, call_args=(driver_options,))
        return self._self__excavator_environment.hooks.make_statement_proxy(query, self, cursor)

    def _exec(self, statement):
        cursor = self.__wrapped__.cursor()
        try:
            cursor.execute(statement)
            return cursor.rowcount
        finally:
            cursor.close()

    def exec(self, statement):
        # type: (str) -> int
        """Execute ``statement`` right away and return the number of affected rows."""
        return self._trace_method(self._exec, QUERY, "exec", query=statement, call_args=(statement,))

    def _query(self, statement, mode_args):
        # invalid fetch mode arguments fail like the driver would, inside the timed call
        style = resolve_fetch_mode(*mode_args) if mode_args else None
        cursor = self.__wrapped__.cursor()
        cursor.execute(statement)
        return cursor, style

    def query(self, statement, mode=FetchMode.DEFAULT, argument=None, ctor_args=None):
        """Execute ``statement`` and return a statement positioned on its result set.

        Only the arguments the fetch mode accepts are forwarded: none for
        ``DEFAULT``, a class and its constructor arguments for ``CLASS``, at
        most one for every other mode.
        """
        mode_args = _query_arguments(mode, argument, ctor_args)
        cursor, style = self._trace_method(
            self._query, QUERY, "query", query=statement, call_args=(statement, mode_args)
        )
        proxy = self._self__excavator_environment.hooks.make_statement_proxy(statement, self, cursor)
        if style is not None:
            proxy.set_fetch_mode(*mode_args)
        return proxy

    def _begin(self):
        begin = getattr(self.__wrapped__, "begin", None)
        if callable(begin):
            return begin()
        self._exec("BEGIN")
        return True

    def begin_transaction(self):
        """Open a transaction; accounted in ``total`` only."""
        return self._trace_method(self._begin, TOTAL, "begin_transaction")

    def commit(self):
        return self._trace_method(self.__wrapped__.commit, COMMIT, "commit")

    def rollback(self):
        return self._trace_method(self.__wrapped__.rollback, ROLLBACK, "rollback")

    def quote(self, value, param_type=ParamType.STR):
        # type: (Any, int) -> str
        """Render ``value`` as a SQL literal using the quoting rules registered for the driver."""
        return drivers.quoter_for(self._self_vendor)(value, param_type)

    def execute(self, query, parameters=None):
        """Shortcut for ``prepare(query)`` followed by ``execute(parameters)``; returns the statement."""
        statement = self.prepare(query)
        statement.execute(parameters)
        return statement

    def __enter__(self):
        # previous versions of the dbapi didn't support context managers. let's
        # reference the func that would be called to ensure that errors
        # messages will be the same.
        self.__wrapped__.__enter__

        # and finally, yield the instrumented connection.
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # not timed: sqlite3 commits or rolls back here on its own
        return self.__wrapped__.__exit__(exc_type, exc_val, exc_tb)


def _query_arguments(mode, argument=None, ctor_args=None):
    # type: (int, Any, Any) -> Tuple[Any, ...]
    if mode == FetchMode.DEFAULT:
        return ()
    if mode == FetchMode.CLASS:
        return (mode, argument, ctor_args if ctor_args is not None else ())
    if argument is None:
        return (mode,)
    return (mode, argument)


def _get_vendor(conn):
    """Return the vendor (e.g postgres, mysql) of the given
    database.
    """
    try:
        name = _get_module_name(conn)
    except Exception:
        log.debug("couldn't parse module name", exc_info=True)
        name = "sql"
    return sql.normalize_vendor(name)


def _get_module_name(conn):
    return conn.__class__.__module__.split(".")[0]


def _dsn_vendor(dsn):
    try:
        return sql.parse_dsn(dsn)[0]
    except ValueError:
        # open_connection() reports the malformed DSN
        return None


def _split_options(options):
    # type: (Optional[Mapping[str, Any]]) -> Tuple[Optional[Dict[str, Any]], Any, Dict[str, Any]]
    driver_options = dict(options or {})
    debug = driver_options.pop(ATTR_DEBUG, None)
    fetch_mode = driver_options.pop(ATTR_FETCH_MODE, FetchMode.TUPLE)
    return debug, fetch_mode, driver_options


def connect(dsn, username=None, password=None, options=None, hooks=None, connection_cls=ConnectionProxy):
    """Open an instrumented connection.

    :param dsn: ``<driver>:<driver specific part>``, e.g. ``sqlite::memory:``
    :param options: ``"debug"`` holds the debugging option bag (instrumentation
        is disabled without one), ``"fetch_mode"`` the default
        :class:`~excavator.constants.FetchMode`; every other key is passed to
        the driver.
    :param hooks: :class:`~excavator.InstrumentationHooks` shared by the
        connection and its statements
    :param connection_cls: the :class:`ConnectionProxy` subclass to return
    """
    debug, fetch_mode, driver_options = _split_options(options)
    debugging = None
    if debug is not None:
        if config.enabled:
            debugging = DebuggingOptions.create(debug, dsn=dsn, username=username)
        else:
            log.debug("instrumentation disabled by configuration, ignoring debugging options")
    environment = DebuggingEnvironment(options=debugging, hooks=hooks)

    vendor = _dsn_vendor(dsn)
    if not environment.enabled:
        raw = drivers.open_connection(dsn, username, password, **driver_options)
        return connection_cls(raw, environment, fetch_mode, vendor)

    recorder = CallRecorder(environment)
    recorder.before(
        "{}::connect".format(SOURCE_CONNECTION),
        (dsn, username, password, options),
        exclude=_CONNECT_EXCLUDED_ARGS,
    )
    raw = timed_call(
        recorder,
        TOTAL,
        (environment.benchmarks,),
        drivers.open_connection,
        (dsn, username, password),
        driver_options,
    )
    return connection_cls(raw, environment, fetch_mode, vendor)
