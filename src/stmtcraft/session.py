"""Execution layer: runs rendered statements on a PEP 249 connection.

The connection must accept the dialect's native placeholder style (``?`` for
sqlite3, mysql-connector in qmark mode, ClickHouse; ``$n`` for asyncpg-style
drivers) unless rendering is interpolated, in which case no parameters are
passed at all.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import Any, Self

from stmtcraft.ast.base import Renderable
from stmtcraft.compiler.codegen import CodeGenerator
from stmtcraft.compiler.validator import validate_sql
from stmtcraft.dialect.base import Dialect
from stmtcraft.dialect.registry import DialectRegistry
from stmtcraft.errors import NotFoundError, TxDoneError, UnsupportedFeature
from stmtcraft.settings import Settings

logger = logging.getLogger("stmtcraft.session")


@dataclass
class ExecResult:
    """Outcome of a data-modifying statement."""

    rowcount: int
    lastrowid: Any = None


class _Runner:
    """Renders statements and runs them on a DB-API connection."""

    def __init__(
        self,
        connection: Any,
        dialect: Dialect | str,
        interpolate: bool | None = None,
        validate: bool = False,
    ) -> None:
        self._conn = connection
        self._dialect = DialectRegistry.get(dialect) if isinstance(dialect, str) else dialect
        self._codegen = CodeGenerator(self._dialect, interpolate=interpolate)
        self._validate = validate

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def render(self, stmt: Renderable) -> tuple[str, list[Any]]:
        sql, params = self._codegen.generate(stmt)
        if self._validate:
            for error in validate_sql(sql, self._dialect.name):
                logger.warning("SQL validation (%s): %s", self._dialect.name, error)
        return sql, params

    def _execute(self, cursor: Any, stmt: Renderable) -> None:
        sql, params = self.render(stmt)
        logger.debug("execute [%s] %s params=%r", self._dialect.name, sql, params)
        if params:
            cursor.execute(sql, params)
        else:
            cursor.execute(sql)

    def exec(self, stmt: Renderable) -> ExecResult:
        """Run a data-modifying statement."""
        with contextlib.closing(self._conn.cursor()) as cursor:
            self._execute(cursor, stmt)
            lastrowid = getattr(cursor, "lastrowid", None)
            return ExecResult(rowcount=cursor.rowcount, lastrowid=lastrowid)

    def load(self, stmt: Renderable) -> list[dict[str, Any]]:
        """Run a query and return every row as a column-name → value dict."""
        with contextlib.closing(self._conn.cursor()) as cursor:
            self._execute(cursor, stmt)
            names = [d[0] for d in cursor.description or ()]
            return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]

    def load_one(self, stmt: Renderable) -> dict[str, Any]:
        """Return the first row; raise :class:`NotFoundError` if there is none."""
        rows = self.load(stmt)
        if not rows:
            raise NotFoundError()
        return rows[0]

    def load_value(self, stmt: Renderable) -> Any:
        """Return the first column of the first row."""
        row = self.load_one(stmt)
        return next(iter(row.values()))


class Session(_Runner):
    """Autocommitting runner bound to one connection.

    Each :meth:`exec` commits immediately; use :meth:`begin` to group
    statements into a transaction.
    """

    @classmethod
    def from_settings(cls, connection: Any, settings: Settings | None = None) -> Self:
        settings = settings if settings is not None else Settings()
        return cls(
            connection,
            settings.sql_dialect,
            interpolate=settings.sql_interpolate,
            validate=settings.sql_validate,
        )

    def exec(self, stmt: Renderable) -> ExecResult:
        result = super().exec(stmt)
        self._conn.commit()
        return result

    def begin(self) -> Tx:
        """Start a transaction on the session's connection."""
        if not self._dialect.capabilities.supports_transactions:
            raise UnsupportedFeature("transactions", self._dialect.name)
        logger.debug("begin transaction [%s]", self._dialect.name)
        return Tx(
            self._conn,
            self._dialect,
            interpolate=self._codegen.interpolate,
            validate=self._validate,
        )


class Tx(_Runner):
    """A transaction: statements run uncommitted until :meth:`commit`.

    As a context manager it commits on normal exit and rolls back when the
    block raises.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def _execute(self, cursor: Any, stmt: Renderable) -> None:
        if self._done:
            raise TxDoneError()
        super()._execute(cursor, stmt)

    def commit(self) -> None:
        if self._done:
            raise TxDoneError()
        self._conn.commit()
        self._done = True
        logger.debug("commit [%s]", self._dialect.name)

    def rollback(self) -> None:
        if self._done:
            raise TxDoneError()
        self._conn.rollback()
        self._done = True
        logger.debug("rollback [%s]", self._dialect.name)

    def rollback_unless_committed(self) -> None:
        """Roll back unless the transaction already ended; safe to call in cleanup."""
        if not self._done:
            self.rollback()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is not None:
            self.rollback_unless_committed()
        elif not self._done:
            self.commit()
