from enum import IntEnum


class ParamType(IntEnum):
    """Declared type of a bound parameter, used when rendering literal queries."""

    NULL = 0
    INT = 1
    STR = 2
    LOB = 3
    STMT = 4
    BOOL = 5


# in/out modifier, OR-ed onto a ParamType for parameters bound with bind_param
PARAM_INPUT_OUTPUT = 0x80000000


class FetchMode(IntEnum):
    """How rows read from a statement are shaped."""

    DEFAULT = 0
    TUPLE = 1
    DICT = 2
    COLUMN = 3
    CLASS = 4
    INTO = 5
    BOUND = 6


# benchmark kinds
QUERY = "query"
PREPARE = "prepare"
FETCH = "fetch"
COMMIT = "commit"
ROLLBACK = "rollback"
TOTAL = "total"

CONNECTION_KINDS = (QUERY, PREPARE, FETCH, COMMIT, ROLLBACK, TOTAL)
STATEMENT_KINDS = (QUERY, FETCH, TOTAL)

# key of the debugging bag in the connect() option mapping
ATTR_DEBUG = "debug"
ATTR_FETCH_MODE = "fetch_mode"

SOURCE_CONNECTION = "Connection"
SOURCE_STATEMENT = "Statement"
