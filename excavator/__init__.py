from ._hooks import FunctionHooks
from ._hooks import InstrumentationHooks
from .benchmarks import BenchmarkEntry
from .benchmarks import BenchmarkStore
from .connection import ConnectionProxy
from .connection import connect
from .constants import PARAM_INPUT_OUTPUT
from .constants import FetchMode
from .constants import ParamType
from .environment import DebuggingEnvironment
from .errors import ConfigurationError
from .errors import ExcavatorError
from .errors import FetchModeError
from .errors import InstrumentationError
from .errors import StackUnderflowError
from .errors import UnknownDriverError
from .errors import UnknownOperationKindError
from .logger import LoggerInterface
from .logger import LoggingSink
from .settings import DebuggingOptions
from .settings import config
from .statement import StatementProxy
from .tools import prepare_modifying_statement
from .variables import Variable


__version__ = "0.1.0"

__all__ = [
    "connect",
    "config",
    "ConnectionProxy",
    "StatementProxy",
    "InstrumentationHooks",
    "FunctionHooks",
    "DebuggingEnvironment",
    "DebuggingOptions",
    "BenchmarkStore",
    "BenchmarkEntry",
    "LoggerInterface",
    "LoggingSink",
    "ParamType",
    "PARAM_INPUT_OUTPUT",
    "FetchMode",
    "Variable",
    "prepare_modifying_statement",
    "ExcavatorError",
    "InstrumentationError",
    "StackUnderflowError",
    "UnknownOperationKindError",
    "ConfigurationError",
    "UnknownDriverError",
    "FetchModeError",
]
