"""
Row shaping for the fetch modes of :class:`excavator.constants.FetchMode`.

DB-API cursors return sequences; statements turn them into tuples, dicts,
single column values or objects depending on the active fetch mode.
"""
from types import SimpleNamespace
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import List  # noqa:F401
from typing import Mapping  # noqa:F401
from typing import MutableMapping
from typing import Optional  # noqa:F401
from typing import Sequence  # noqa:F401
from typing import Tuple  # noqa:F401

import attr

from .constants import FetchMode
from .errors import FetchModeError
from .variables import Variable


# accepted number of arguments per fetch mode
_ARITY = {
    FetchMode.DEFAULT: (0, 0),
    FetchMode.TUPLE: (0, 0),
    FetchMode.DICT: (0, 0),
    FetchMode.COLUMN: (0, 1),
    FetchMode.CLASS: (1, 2),
    FetchMode.INTO: (1, 1),
    FetchMode.BOUND: (0, 0),
}


@attr.s(frozen=True, slots=True)
class FetchStyle(object):
    mode = attr.ib(type=FetchMode)
    argument = attr.ib(default=None)
    ctor_args = attr.ib(default=(), type=Tuple[Any, ...])


def resolve_fetch_mode(mode, *args):
    # type: (int, *Any) -> FetchStyle
    """Validate a fetch mode and its arguments.

    ``COLUMN`` takes an optional column index, ``CLASS`` a class and optional
    constructor arguments, ``INTO`` the object to fill. Every other mode
    takes no argument.
    """
    try:
        mode = FetchMode(mode)
    except ValueError:
        raise FetchModeError("unknown fetch mode %r" % (mode,)) from None
    low, high = _ARITY[mode]
    if not low <= len(args) <= high:
        if low == high:
            expected = str(low)
        else:
            expected = "%d to %d" % (low, high)
        raise FetchModeError("fetch mode %s takes %s argument(s), %d given" % (mode.name, expected, len(args)))

    if mode == FetchMode.COLUMN:
        column = args[0] if args else 0
        if not isinstance(column, int) or isinstance(column, bool) or column < 0:
            raise FetchModeError("column index must be a non-negative integer, got %r" % (column,))
        return FetchStyle(mode, column)
    if mode == FetchMode.CLASS:
        cls = args[0]
        if not callable(cls):
            raise FetchModeError("fetch mode CLASS needs a class, got %r" % (cls,))
        ctor_args = args[1] if len(args) > 1 and args[1] is not None else ()
        return FetchStyle(mode, cls, tuple(ctor_args))
    if mode == FetchMode.INTO:
        if args[0] is None:
            raise FetchModeError("fetch mode INTO needs an object to fill")
        return FetchStyle(mode, args[0])
    return FetchStyle(mode)


def mode_arguments(argument=None, ctor_args=None):
    # type: (Any, Optional[Sequence[Any]]) -> Tuple[Any, ...]
    """Trailing fetch mode arguments, trimmed after the last one given."""
    if ctor_args is not None:
        return (argument, ctor_args)
    if argument is not None:
        return (argument,)
    return ()


def column_names(description):
    # type: (Optional[Sequence[Sequence[Any]]]) -> List[str]
    return [column[0] for column in description or ()]


def column_value(row, column):
    # type: (Sequence[Any], int) -> Any
    try:
        return row[column]
    except IndexError:
        raise FetchModeError("invalid column index %d, the row has %d column(s)" % (column, len(row))) from None


def _fill(obj, names, row):
    if isinstance(obj, MutableMapping):
        obj.update(zip(names, row))
    else:
        for name, value in zip(names, row):
            setattr(obj, name, value)
    return obj


def _assign_bound(bound, names, row):
    # type: (Mapping[Any, Variable], List[str], Sequence[Any]) -> bool
    for column, variable in bound.items():
        if isinstance(column, str):
            try:
                index = names.index(column)
            except ValueError:
                raise FetchModeError("no column named %r in the result set" % column) from None
        else:
            # bound columns are 1-based
            index = column - 1
        variable.value = column_value(row, index)
    return True


def shape_row(row, style, description, bound=None):
    # type: (Sequence[Any], FetchStyle, Any, Optional[Mapping[Any, Variable]]) -> Any
    mode = style.mode
    if mode == FetchMode.TUPLE:
        return tuple(row)
    if mode == FetchMode.COLUMN:
        return column_value(row, style.argument)
    names = column_names(description)
    if mode == FetchMode.DICT:
        return dict(zip(names, row))
    if mode == FetchMode.CLASS:
        return _fill(style.argument(*style.ctor_args), names, row)
    if mode == FetchMode.INTO:
        return _fill(style.argument, names, row)
    if mode == FetchMode.BOUND:
        return _assign_bound(bound or {}, names, row)
    raise FetchModeError("fetch mode %s cannot shape rows" % mode.name)


def shape_rows(rows, style, description, bound=None):
    # type: (Sequence[Sequence[Any]], FetchStyle, Any, Optional[Mapping[Any, Variable]]) -> List[Any]
    if style.mode in (FetchMode.INTO, FetchMode.BOUND):
        raise FetchModeError("fetch mode %s is not supported when fetching all rows" % style.mode.name)
    return [shape_row(row, style, description, bound) for row in rows]


def object_style(cls=None, ctor_args=None):
    # type: (Optional[type], Optional[Sequence[Any]]) -> FetchStyle
    return resolve_fetch_mode(FetchMode.CLASS, cls if cls is not None else SimpleNamespace, ctor_args)
