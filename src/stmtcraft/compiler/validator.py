"""Post-render SQL validation using sqlglot."""

from __future__ import annotations

import sqlglot
from sqlglot.errors import SqlglotError

# stmtcraft dialect name -> sqlglot reader.
_SQLGLOT_READERS: dict[str, str] = {
    "mysql": "mysql",
    "postgres": "postgres",
    "sqlite": "sqlite",
    "clickhouse": "clickhouse",
}


def validate_sql(sql: str, dialect_name: str) -> list[str]:
    """Parse rendered SQL with sqlglot and report problems.

    A statement tree renders to exactly one SQL statement, so text that
    parses into several is reported as well. An empty list means sqlglot
    accepted the text; the result is advisory and never blocks a render.
    """
    reader = _SQLGLOT_READERS.get(dialect_name)
    if reader is None:
        return [f"No sqlglot reader for dialect '{dialect_name}'; validation skipped"]

    try:
        parsed = sqlglot.parse(sql, read=reader)
    except SqlglotError as exc:
        return [str(exc)]

    statements = [stmt for stmt in parsed if stmt is not None]
    if len(statements) != 1:
        return [f"Expected one SQL statement, parsed {len(statements)}"]
    return []
