import re
import uuid
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Mapping
from typing import Optional  # noqa:F401
from typing import Tuple  # noqa:F401

import wrapt

from .benchmarks import BenchmarkStore
from .constants import FETCH
from .constants import QUERY
from .constants import SOURCE_STATEMENT
from .constants import ParamType
from .environment import DebuggingEnvironment
from .ext.sql import base_type
from .fetch import FetchStyle  # noqa:F401
from .fetch import column_value
from .fetch import mode_arguments
from .fetch import object_style
from .fetch import resolve_fetch_mode
from .fetch import shape_row
from .fetch import shape_rows
from .recorder import CallRecorder
from .recorder import timed_call
from .variables import resolve


_NO_ROW = object()


def _as_int(value):
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


class StatementProxy(wrapt.ObjectProxy):
    """StatementProxy wraps a DB-API cursor bound to one query template.

    ``execute()`` is timed and logged with the query rendered as a literal
    string; ``fetch*()`` calls are timed but not logged. Timings go both to
    the store shared with the connection and to the statement's own store.
    """

    _excavator_source = SOURCE_STATEMENT

    def __init__(self, template, connection, cursor, hooks=None):
        super(StatementProxy, self).__init__(cursor)
        environment = DebuggingEnvironment.get_from(connection)
        if environment is None:
            raise TypeError("statements can only be created from an instrumented connection, got %r" % (connection,))
        self._self_template = template
        self._self_connection = connection
        self._self__excavator_environment = environment
        self._self_recorder = CallRecorder(environment, hooks)
        self._self_benchmarks = BenchmarkStore.for_statement()
        # placeholder -> (value or Variable, declared type), in bind order
        self._self_bindings = {}  # type: Dict[Any, Tuple[Any, int]]
        self._self_bound_columns = {}  # type: Dict[Any, Any]
        self._self_fetch_style = None  # type: Optional[FetchStyle]
        self._self_last_executed_query = None  # type: Optional[str]

    def __repr__(self):
        return "<{} {!r} wrapping {!r}>".format(type(self).__name__, self._self_template, self.__wrapped__)

    @property
    def query_string(self):
        # type: () -> str
        return self._self_template

    @property
    def last_executed_query(self):
        # type: () -> Optional[str]
        return self._self_last_executed_query

    @property
    def connection(self):
        return self._self_connection

    @property
    def debugging_environment(self):
        # type: () -> DebuggingEnvironment
        return self._self__excavator_environment

    def benchmarks(self):
        """Snapshot of this statement's own ``query``, ``fetch`` and ``total`` benchmarks."""
        return self._self_benchmarks.snapshot()

    def _source(self, method):
        return "{}::{}".format(self._excavator_source, method)

    @staticmethod
    def _binding_key(param):
        if isinstance(param, int) and not isinstance(param, bool):
            if param < 1:
                raise IndexError("positional parameters are 1-based, got %d" % param)
            return param
        if isinstance(param, str) and param:
            return param[1:] if param.startswith(":") else param
        raise TypeError("parameter must be a 1-based position or a name, got %r" % (param,))

    def bind_value(self, param, value, param_type=ParamType.STR):
        """Bind a value to a positional (1-based) or named placeholder."""
        self._self_bindings[self._binding_key(param)] = (value, param_type)
        return True

    def bind_param(self, param, variable, param_type=ParamType.STR, max_length=0, driver_options=None):
        """Bind a :class:`~excavator.variables.Variable`, read at each ``execute()``."""
        self._self_bindings[self._binding_key(param)] = (variable, param_type)
        return True

    def bind_column(self, column, variable, param_type=ParamType.STR, max_length=0, driver_options=None):
        """Bind a result column (1-based position or name) to a variable filled by ``fetch(FetchMode.BOUND)``."""
        self._self_bound_columns[column] = variable
        return True

    def set_fetch_mode(self, mode, *args):
        self._self_fetch_style = resolve_fetch_mode(mode, *args)
        return True

    def _native_parameters(self):
        bindings = self._self_bindings
        if not bindings:
            return None
        named = {key: resolve(value) for key, (value, _) in bindings.items() if isinstance(key, str)}
        if named:
            return named
        return tuple(resolve(value) for _, (value, _) in sorted(bindings.items()))

    def _execute(self):
        parameters = self._native_parameters()
        if parameters is None:
            return self.__wrapped__.execute(self._self_template)
        return self.__wrapped__.execute(self._self_template, parameters)

    def execute(self, parameters=None):
        """Execute the template with the bound values.

        ``parameters`` (a sequence for ``?`` placeholders or a mapping for
        named ones) are bound as strings first, like separate ``bind_value()``
        calls, and stay bound for later executions.
        """
        if parameters is not None:
            items = parameters.items() if isinstance(parameters, Mapping) else enumerate(parameters)
            for key, value in items:
                self.bind_value(key + 1 if isinstance(key, int) else key, value)

        environment = self._self__excavator_environment
        if not environment.enabled:
            self._execute()
            return self

        shared = environment.benchmarks
        shared.count(QUERY)
        self._self_benchmarks.count(QUERY)
        query = self.render()
        self._self_recorder.before(self._source("execute"), query=query)
        timed_call(self._self_recorder, QUERY, (shared, self._self_benchmarks), self._execute, count=False)
        return self

    def _literal(self, value, param_type):
        value = resolve(value)
        declared = base_type(param_type)
        if declared == ParamType.BOOL:
            if isinstance(value, int):
                return str(int(bool(value)))
            return "NULL" if value is None else str(value)
        if declared == ParamType.INT:
            return str(_as_int(value))
        return self._self_connection.quote(value, param_type)

    def render(self):
        # type: () -> str
        """Return the template with every bound value substituted as a SQL literal.

        Only used for logging and :attr:`last_executed_query`; the driver
        always receives the template and the native bindings.
        """
        query = self._self_template
        if self._self_bindings:
            marker = "-%s-" % uuid.uuid4().hex
            query = query.replace("?", marker)
            positional = []
            named = {}
            for key, (value, param_type) in self._self_bindings.items():
                if isinstance(key, str):
                    named[key] = self._literal(value, param_type)
                else:
                    positional.append((key, self._literal(value, param_type)))
            literals = iter([literal for _, literal in sorted(positional)])

            def substitute(match):
                if match.group(1) is not None:
                    return next(literals, marker)
                return named.get(match.group(2), match.group(0))

            # one pass: substituted literals are never scanned again
            query = re.sub(r"(%s)|(?<!:):(\w+)" % re.escape(marker), substitute, query)
            query = query.replace(marker, "?")
        self._self_last_executed_query = query
        return query

    def _timed_fetch(self, method, *args):
        environment = self._self__excavator_environment
        if not environment.enabled:
            return method(*args)
        return timed_call(None, FETCH, (environment.benchmarks, self._self_benchmarks), method, args)

    def _style(self, mode=None, args=()):
        # DEFAULT defers to the statement's fetch mode, then to the connection's
        style = resolve_fetch_mode(mode, *args) if mode is not None else None
        if style is None or not style.mode:
            style = self._self_fetch_style
        if style is None or not style.mode:
            style = self._self_connection.default_fetch_style
        return style

    def _fetch_one(self, mode, args):
        style = self._style(mode, args)
        row = self.__wrapped__.fetchone()
        if row is None:
            return _NO_ROW
        return shape_row(row, style, self.__wrapped__.description, self._self_bound_columns)

    def fetch(self, mode=None, *args):
        """Fetch the next row shaped by ``mode`` (the statement's fetch mode by default); ``None`` when exhausted."""
        row = self._timed_fetch(self._fetch_one, mode, args)
        return None if row is _NO_ROW else row

    def _fetch_all(self, mode, args):
        style = self._style(mode, args)
        rows = self.__wrapped__.fetchall()
        return shape_rows(rows, style, self.__wrapped__.description, self._self_bound_columns)

    def fetch_all(self, mode=None, argument=None, ctor_args=None):
        """Fetch the remaining rows; ``argument`` and ``ctor_args`` are forwarded only when given."""
        return self._timed_fetch(self._fetch_all, mode, mode_arguments(argument, ctor_args))

    def _fetch_column(self, column):
        row = self.__wrapped__.fetchone()
        if row is None:
            return None
        return column_value(row, column)

    def fetch_column(self, column=0):
        return self._timed_fetch(self._fetch_column, column)

    def _fetch_object(self, cls, ctor_args):
        style = object_style(cls, ctor_args)
        row = self.__wrapped__.fetchone()
        if row is None:
            return None
        return shape_row(row, style, self.__wrapped__.description)

    def fetch_object(self, cls=None, ctor_args=None):
        """Fetch the next row as an instance of ``cls`` (``types.SimpleNamespace`` by default)."""
        return self._timed_fetch(self._fetch_object, cls, ctor_args)

    def __iter__(self):
        while True:
            row = self._timed_fetch(self._fetch_one, None, ())
            if row is _NO_ROW:
                return
            yield row

    def __enter__(self):
        # previous versions of the dbapi didn't support context managers. let's
        # reference the func that would be called to ensure that errors
        # messages will be the same.
        self.__wrapped__.__enter__

        # and finally, yield the instrumented statement.
        return self
