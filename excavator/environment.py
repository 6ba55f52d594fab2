from typing import Any  # noqa:F401
from typing import Optional  # noqa:F401

import wrapt

from ._hooks import InstrumentationHooks
from .benchmarks import BenchmarkStore
from .internal.logger import get_logger
from .settings.options import DebuggingOptions  # noqa:F401


log = get_logger(__name__)

# To set attributes on wrapt proxy objects use this prefix:
# http://wrapt.readthedocs.io/en/latest/wrappers.html
_ENVIRONMENT_NAME = "_excavator_environment"
_ENVIRONMENT_PROXY_NAME = "_self_" + _ENVIRONMENT_NAME


class DebuggingEnvironment(object):
    """Instrumentation state shared by a connection and every statement it produces.

    ``options`` is ``None`` when instrumentation is fully disabled. With
    options but no logger only benchmarks are collected.

        >>> env = DebuggingEnvironment.get_from(conn)
        >>> env.benchmarks["query"].count
        3
    """

    __slots__ = ["options", "benchmarks", "hooks", "_initialized"]

    def __init__(
        self,
        options=None,  # type: Optional[DebuggingOptions]
        benchmarks=None,  # type: Optional[BenchmarkStore]
        hooks=None,  # type: Optional[InstrumentationHooks]
    ):
        # type: (...) -> None
        self.options = options
        self.benchmarks = benchmarks if benchmarks is not None else BenchmarkStore()
        self.hooks = hooks if hooks is not None else InstrumentationHooks()
        self._initialized = True

    def __setattr__(self, name, value):
        if getattr(self, "_initialized", False):
            raise AttributeError("can't mutate a debugging environment, create a new connection instead")
        super(DebuggingEnvironment, self).__setattr__(name, value)

    @property
    def enabled(self):
        # type: () -> bool
        return self.options is not None

    @property
    def logging_enabled(self):
        # type: () -> bool
        return self.options is not None and self.options.logging_enabled

    def __repr__(self):
        return "DebuggingEnvironment(options=%r, benchmarks=%r, hooks=%r)" % (self.options, self.benchmarks, self.hooks)

    @staticmethod
    def get_from(obj):
        # type: (Any) -> Optional[DebuggingEnvironment]
        """Return the environment attached to an instrumented connection or statement, if any."""
        name = _ENVIRONMENT_PROXY_NAME if isinstance(obj, wrapt.ObjectProxy) else _ENVIRONMENT_NAME
        return getattr(obj, name, None)
