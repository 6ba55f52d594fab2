import binascii
import datetime
import decimal
from typing import Any  # noqa:F401
from typing import Tuple  # noqa:F401

from ..constants import PARAM_INPUT_OUTPUT
from ..constants import ParamType


DSN_SEPARATOR = ":"


def normalize_vendor(vendor):
    # type: (str) -> str
    """Return a canonical name for a type of database."""
    if not vendor:
        return "db"  # should this ever happen?
    elif "sqlite" in vendor:
        return "sqlite"
    elif "postgres" in vendor or vendor in ("psycopg", "psycopg2", "pgsql"):
        return "postgres"
    elif "mysql" in vendor or vendor == "MySQLdb":
        return "mysql"
    else:
        return vendor


def parse_dsn(dsn):
    # type: (str) -> Tuple[str, str]
    """
    Split a DSN into its driver name and the driver specific remainder.

    >>> parse_dsn("sqlite::memory:")
    ('sqlite', ':memory:')
    >>> parse_dsn("pgsql:host=localhost;dbname=test")
    ('postgres', 'host=localhost;dbname=test')
    """
    scheme, sep, body = dsn.partition(DSN_SEPARATOR)
    if not sep or not scheme:
        raise ValueError("DSN %r has no driver prefix, expected '<driver>:<parameters>'" % (dsn,))
    return normalize_vendor(scheme.strip().lower()), body


def base_type(param_type):
    # type: (int) -> int
    """Strip the in/out modifier off a declared parameter type."""
    return int(param_type) & ~PARAM_INPUT_OUTPUT


def quote_literal(value, param_type=ParamType.STR):
    # type: (Any, int) -> str
    """Render ``value`` as a SQL literal.

    Only used to build human readable queries for logging; it is never sent
    to the database.
    """
    param_type = base_type(param_type)
    if value is None or param_type == ParamType.NULL:
        return "NULL"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "X'%s'" % binascii.hexlify(bytes(value)).decode("ascii").upper()
    if param_type == ParamType.LOB and isinstance(value, str):
        return "X'%s'" % binascii.hexlify(value.encode("utf-8")).decode("ascii").upper()
    if isinstance(value, bool):
        value = int(value)
    elif isinstance(value, (datetime.date, datetime.time)):
        value = value.isoformat(sep=" ") if isinstance(value, datetime.datetime) else value.isoformat()
    elif isinstance(value, float):
        value = repr(value)
    elif isinstance(value, decimal.Decimal):
        value = format(value, "f")
    return "'%s'" % str(value).replace("'", "''")
