from typing import Any  # noqa:F401

import attr


@attr.s(slots=True, eq=False)
class Variable(object):
    """A mutable holder bound with ``bind_param`` or ``bind_column``.

    Parameters bound this way are read when the statement executes, not when
    they are bound; columns bound this way are written by ``fetch(FetchMode.BOUND)``::

        user_id = Variable()
        stmt = conn.prepare("SELECT name FROM users WHERE id = ?")
        stmt.bind_param(1, user_id, ParamType.INT)
        for user_id.value in (1, 2, 3):
            stmt.execute()
    """

    value = attr.ib(default=None)  # type: Any


def resolve(value):
    # type: (Any) -> Any
    return value.value if isinstance(value, Variable) else value
