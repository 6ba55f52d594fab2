"""
Exceptions raised by the instrumentation layer itself.

Errors raised by the wrapped driver are never converted: they reach the
caller unchanged once benchmarks and call logging have been updated.
"""


class ExcavatorError(Exception):
    """Base class for errors originating in excavator."""


class InstrumentationError(ExcavatorError):
    """A broken instrumentation invariant. Always a programming error, never logged through the sink."""


class StackUnderflowError(InstrumentationError):
    """``after()`` was called without a matching ``before()``."""


class UnknownOperationKindError(InstrumentationError, KeyError):
    """A benchmark kind outside the fixed key set was referenced."""

    def __str__(self):
        return Exception.__str__(self)


class ConfigurationError(InstrumentationError):
    """Debugging options are missing a required key or hold an invalid value."""


class UnknownDriverError(ExcavatorError, LookupError):
    """No driver is registered for the scheme of a DSN."""


class FetchModeError(ExcavatorError, ValueError):
    """A fetch mode was given arguments it does not accept."""
