import re
from typing import Any  # noqa:F401
from typing import Mapping  # noqa:F401
from typing import Optional  # noqa:F401

from .constants import ParamType


_INSERT_RE = re.compile(r"^\s*insert\s+", re.IGNORECASE)


def quote_identifier(name):
    # type: (str) -> str
    return '"%s"' % name.replace('"', '""')


def prepare_modifying_statement(connection, template, record, types=None, raw_values=None):
    # type: (Any, str, Mapping[str, Any], Optional[Mapping[str, int]], Optional[Mapping[str, str]]) -> Any
    """
    Prepare an INSERT or UPDATE statement for a record whose fields vary from call to call.

    ``template`` holds a single ``%s`` where the column list goes. Every field
    of ``record`` is bound as a named parameter (typed by ``types``, strings by
    default); ``raw_values`` are SQL expressions inlined as they are::

        stmt = prepare_modifying_statement(
            conn,
            'UPDATE "table" %s WHERE "id" = :id',
            {"field": "value"},
            {"field": ParamType.STR},
            {"time_updated": "CURRENT_TIMESTAMP"},
        )
        stmt.bind_value("id", 100500, ParamType.INT)
        stmt.execute()

    prepares::

        UPDATE "table" SET "field" = :field, "time_updated" = CURRENT_TIMESTAMP WHERE "id" = :id
    """
    types = types or {}
    raw_values = raw_values or {}
    fields = [quote_identifier(name) for name in list(record) + list(raw_values)]
    placeholders = [":%s" % name for name in record] + list(raw_values.values())

    if _INSERT_RE.match(template):
        clause = "(%s) VALUES (%s)" % (", ".join(fields), ", ".join(placeholders))
    else:
        clause = "SET %s" % ", ".join("%s = %s" % pair for pair in zip(fields, placeholders))

    statement = connection.prepare(template % clause)
    for name, value in record.items():
        statement.bind_value(name, value, types.get(name, ParamType.STR))
    return statement
