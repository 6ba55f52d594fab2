from .config import ExcavatorConfig
from .config import config
from .options import DebuggingOptions
from .options import FormatOptions
from .options import SourceFilter


__all__ = ["ExcavatorConfig", "config", "DebuggingOptions", "FormatOptions", "SourceFilter"]
