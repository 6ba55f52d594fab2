from typing import Callable  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401

import attr

from .internal.logger import get_logger


log = get_logger(__name__)


class InstrumentationHooks(object):
    """
    Customization points of an instrumented connection and its statements.

    Subclass and override what you need, then pass an instance to
    :func:`excavator.connect`::

        class TaggingHooks(InstrumentationHooks):
            def customize_scope(self, scope):
                scope["APP"] = "billing"

            def redact_query(self, query):
                return query[:200]

        conn = connect(dsn, options={"debug": {"logger": sink}}, hooks=TaggingHooks())

    Statements inherit the hooks of the connection that produced them unless
    :meth:`make_statement_proxy` hands them different ones.
    """

    def customize_scope(self, scope):
        # type: (Dict[str, str]) -> None
        """Add or override log template variables in place before the message is rendered."""

    def redact_query(self, query):
        # type: (str) -> str
        """Transform a query before it is placed into the log scope."""
        return query

    def make_statement_proxy(self, template, connection, raw_statement):
        """Wrap a raw driver cursor produced by ``prepare()`` or ``query()``."""
        from .statement import StatementProxy

        return StatementProxy(template, connection, raw_statement)

    def _run_customize_scope(self, scope):
        try:
            self.customize_scope(scope)
        except Exception:
            log.error("Failed to run scope hook %r", self.customize_scope, exc_info=True)

    def _run_redact_query(self, query):
        try:
            return self.redact_query(query)
        except Exception:
            log.error("Failed to run query redaction hook %r", self.redact_query, exc_info=True)
            return query


@attr.s(slots=True)
class FunctionHooks(InstrumentationHooks):
    """Hooks assembled from plain callables instead of a subclass.

    Example::

        hooks = FunctionHooks(redact_query=lambda q: re.sub(r"'[^']*'", "'?'", q))
    """

    scope_func = attr.ib(default=None, type=Optional[Callable[[Dict[str, str]], None]], kw_only=True)
    redact_func = attr.ib(default=None, type=Optional[Callable[[str], str]], kw_only=True)
    factory_func = attr.ib(default=None, type=Optional[Callable], kw_only=True)

    def customize_scope(self, scope):
        if self.scope_func is not None:
            self.scope_func(scope)

    def redact_query(self, query):
        if self.redact_func is not None:
            return self.redact_func(query)
        return query

    def make_statement_proxy(self, template, connection, raw_statement):
        if self.factory_func is not None:
            log.debug("wrapping statement with custom factory %r", self.factory_func)
            return self.factory_func(template, connection, raw_statement)
        return super(FunctionHooks, self).make_statement_proxy(template, connection, raw_statement)
