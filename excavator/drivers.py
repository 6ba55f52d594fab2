"""
Driver registry.

A DSN names its driver with a ``<driver>:`` prefix, the remainder is handed
to the driver's connect function::

    sqlite::memory:
    sqlite:/var/lib/app/data.sqlite

Only ``sqlite`` (standard library ``sqlite3``) is registered by default.
Other DB-API drivers are registered by the application::

    import psycopg
    from excavator import drivers

    def connect_postgres(body, username=None, password=None, **options):
        return psycopg.connect(body, user=username, password=password, **options)

    drivers.register_driver("postgres", connect_postgres)
"""
import sqlite3
from typing import Any  # noqa:F401
from typing import Callable  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401

import attr

from .errors import UnknownDriverError
from .ext import sql
from .internal.logger import get_logger


log = get_logger(__name__)


@attr.s(frozen=True, slots=True)
class Driver(object):
    name = attr.ib(type=str)
    connect = attr.ib(type=Callable[..., Any])
    quote = attr.ib(type=Callable[..., str], default=sql.quote_literal)


_DRIVERS = {}  # type: Dict[str, Driver]


def register_driver(name, connect, quote=None):
    # type: (str, Callable[..., Any], Optional[Callable[..., str]]) -> Driver
    """Register ``connect(body, username=None, password=None, **options)`` for DSNs prefixed with ``name:``.

    ``quote(value, param_type)`` renders SQL literals for logged queries and
    defaults to :func:`excavator.ext.sql.quote_literal`.
    """
    name = sql.normalize_vendor(name)
    driver = Driver(name, connect, quote if quote is not None else sql.quote_literal)
    if name in _DRIVERS:
        log.debug("replacing driver %r", name)
    _DRIVERS[name] = driver
    return driver


def unregister_driver(name):
    # type: (str) -> None
    _DRIVERS.pop(sql.normalize_vendor(name), None)


def get_driver(name):
    # type: (str) -> Driver
    try:
        return _DRIVERS[sql.normalize_vendor(name)]
    except KeyError:
        raise UnknownDriverError(
            "no driver registered for %r, known drivers: %s" % (name, ", ".join(sorted(_DRIVERS)) or "none")
        ) from None


def open_connection(dsn, username=None, password=None, **options):
    # type: (str, Optional[str], Optional[str], **Any) -> Any
    """Open a raw DB-API connection for ``dsn``."""
    try:
        name, body = sql.parse_dsn(dsn)
    except ValueError as e:
        raise UnknownDriverError(str(e)) from e
    driver = get_driver(name)
    log.debug("opening %s connection", driver.name)
    return driver.connect(body, username, password, **options)


def quoter_for(vendor):
    # type: (str) -> Callable[..., str]
    driver = _DRIVERS.get(sql.normalize_vendor(vendor))
    if driver is None:
        return sql.quote_literal
    return driver.quote


def _connect_sqlite(body, username=None, password=None, **options):
    # sqlite has no authentication, credentials are only kept for logging
    return sqlite3.connect(body or ":memory:", **options)


register_driver("sqlite", _connect_sqlite)
