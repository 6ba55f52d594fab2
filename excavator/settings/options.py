"""
Per-connection debugging options.

The option bag given to :func:`excavator.connect` under the ``"debug"`` key is
deep-merged over the process defaults from :mod:`excavator.settings.config`
and frozen. A connection and every statement it produces share the same
:class:`DebuggingOptions` instance.
"""
import copy
import datetime
import logging
import re
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Mapping  # noqa:F401
from typing import Optional  # noqa:F401
from typing import Tuple  # noqa:F401

import attr

from ..errors import ConfigurationError
from ..internal.logger import get_logger
from ..logger import LoggerInterface
from ..logger import LoggingSink
from .config import config as global_config


log = get_logger(__name__)

REGEX_DELIMITER = "/"

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}

_BAG_KEYS = frozenset(("logger", "format", "sources"))
_FORMAT_KEYS = ("timestamp", "precision", "count", "call", "query")


# Borrowed from: https://stackoverflow.com/questions/20656135/python-deep-merge-dictionary-data#20666342
def _deepmerge(source, destination):
    """
    Merge the first provided ``dict`` into the second.

    :param dict source: The ``dict`` to merge into ``destination``
    :param dict destination: The ``dict`` that should get updated
    :rtype: dict
    :returns: ``destination`` modified
    """
    for key, value in source.items():
        if isinstance(value, Mapping):
            # get node or create one
            node = destination.setdefault(key, {})
            if not isinstance(node, dict):
                raise ConfigurationError("option %r cannot be merged into a mapping" % key)
            _deepmerge(value, node)
        else:
            destination[key] = value

    return destination


@attr.s(frozen=True, slots=True)
class SourceFilter(object):
    """One entry of the ``sources`` filter list.

    Entries beginning with ``/`` are delimited regular expressions with
    optional trailing flags (``/^Statement::/``, ``/commit$/i``) and match
    anywhere in the source. Every other entry must equal the source exactly.
    """

    pattern = attr.ib(type=str)
    regex = attr.ib(type=Optional[re.Pattern], default=None, eq=False)

    @classmethod
    def compile(cls, pattern):
        if isinstance(pattern, re.Pattern):
            return cls(pattern.pattern, pattern)
        if not isinstance(pattern, str):
            raise ConfigurationError("source filter must be a string, got %r" % (pattern,))
        if not pattern.startswith(REGEX_DELIMITER):
            return cls(pattern)

        end = pattern.rfind(REGEX_DELIMITER)
        if end == 0:
            raise ConfigurationError("unterminated regular expression source filter %r" % pattern)
        flags = 0
        for flag in pattern[end + 1 :]:
            if flag not in _REGEX_FLAGS:
                raise ConfigurationError("unknown flag %r in source filter %r" % (flag, pattern))
            flags |= _REGEX_FLAGS[flag]
        try:
            regex = re.compile(pattern[1:end], flags)
        except re.error as e:
            raise ConfigurationError("invalid regular expression source filter %r: %s" % (pattern, e)) from e
        return cls(pattern, regex)

    def matches(self, source):
        # type: (str) -> bool
        if self.regex is not None:
            return self.regex.search(source) is not None
        return self.pattern == source


@attr.s(frozen=True, slots=True)
class FormatOptions(object):
    timestamp = attr.ib(type=str)
    precision = attr.ib(type=str)
    count = attr.ib(type=str)
    call = attr.ib(type=str)
    query = attr.ib(type=str)


@attr.s(frozen=True, slots=True)
class DebuggingOptions(object):
    logger = attr.ib(type=Optional[LoggerInterface])
    format = attr.ib(type=FormatOptions)
    sources = attr.ib(type=Tuple[SourceFilter, ...], default=())
    dsn = attr.ib(type=Optional[str], default=None)
    username = attr.ib(type=Optional[str], default=None)

    @property
    def logging_enabled(self):
        # type: () -> bool
        return self.logger is not None

    def should_log(self, source):
        # type: (str) -> bool
        """An empty filter list logs everything; otherwise the first matching entry wins."""
        if not self.sources:
            return True
        return any(f.matches(source) for f in self.sources)

    @classmethod
    def create(cls, bag=None, dsn=None, username=None, defaults=None):
        """Build frozen options from an option bag merged over ``defaults``.

        ``defaults`` falls back to the environment configuration.
        """
        if defaults is None:
            defaults = global_config.defaults()

        bag = dict(bag or {})
        unknown = set(bag) - _BAG_KEYS
        if unknown:
            raise ConfigurationError("unknown debugging options: %s" % ", ".join(sorted(unknown)))
        fmt = bag.get("format")
        if fmt is not None:
            if not isinstance(fmt, Mapping):
                raise ConfigurationError("debugging option 'format' must be a mapping")
            unknown = set(fmt) - set(_FORMAT_KEYS)
            if unknown:
                raise ConfigurationError("unknown format options: %s" % ", ".join(sorted(unknown)))

        merged = _deepmerge(bag, copy.deepcopy(dict(defaults)))

        formats = merged.get("format") or {}
        for key in _FORMAT_KEYS:
            if not isinstance(formats.get(key), str):
                raise ConfigurationError("format option %r must be a string, got %r" % (key, formats.get(key)))
        _check_patterns(formats)

        sources = merged.get("sources") or ()
        if isinstance(sources, (str, re.Pattern)):
            sources = (sources,)

        return cls(
            logger=_coerce_logger(merged.get("logger")),
            format=FormatOptions(**{key: formats[key] for key in _FORMAT_KEYS}),
            sources=tuple(SourceFilter.compile(s) for s in sources),
            dsn=dsn,
            username=username,
        )


def _check_patterns(formats):
    for key, sample in (("precision", 0.0), ("count", 0)):
        try:
            formats[key] % sample
        except (TypeError, ValueError) as e:
            raise ConfigurationError("invalid %s pattern %r: %s" % (key, formats[key], e)) from e
    try:
        datetime.datetime.now().strftime(formats["timestamp"])
    except ValueError as e:
        raise ConfigurationError("invalid timestamp pattern %r: %s" % (formats["timestamp"], e)) from e


def _coerce_logger(logger):
    if logger is None:
        return None
    if isinstance(logger, logging.Logger):
        # Logger.log takes a level first; adapt it to the sink protocol
        log.debug("wrapping %r into a LoggingSink", logger)
        return LoggingSink(logger)
    if not callable(getattr(logger, "log", None)):
        raise ConfigurationError("debugging logger %r has no callable 'log(message, scope)' method" % (logger,))
    return logger
