"""
Call-logging sinks.

Any object with a ``log(message, scope)`` method can receive call logs. The
return value is ignored and the method is called at most once per
instrumented call.
"""
import logging
from typing import Mapping
from typing import Optional
from typing import Protocol
from typing import runtime_checkable


SCOPE_RECORD_ATTR = "excavator_scope"


@runtime_checkable
class LoggerInterface(Protocol):
    def log(self, message: str, scope: Mapping[str, str]) -> None:
        ...


class LoggingSink(object):
    """Forward call logs to a standard library ``logging.Logger``.

    The rendered message becomes the record message and the scope is attached
    to the record as ``record.excavator_scope``::

        import logging
        from excavator import LoggingSink, connect

        logging.basicConfig(level=logging.DEBUG)
        conn = connect("sqlite::memory:", options={"debug": {"logger": LoggingSink()}})
    """

    def __init__(self, logger=None, level=logging.DEBUG):
        # type: (Optional[logging.Logger], int) -> None
        self.logger = logger if logger is not None else logging.getLogger("excavator.calls")
        self.level = level

    def log(self, message: str, scope: Mapping[str, str]) -> None:
        if self.logger.isEnabledFor(self.level):
            # "%s" keeps literal percent signs of the rendered query intact
            self.logger.log(self.level, "%s", message, extra={SCOPE_RECORD_ATTR: dict(scope)})

    def __repr__(self):
        return "{}({!r}, level={})".format(self.__class__.__name__, self.logger.name, logging.getLevelName(self.level))
