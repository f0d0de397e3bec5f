"""Shared test fixtures for stmtcraft."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from typing import Any

import pytest

from stmtcraft.ast.base import Renderable
from stmtcraft.buffer import Buffer
from stmtcraft.dialect.base import Dialect
from stmtcraft.dialect.clickhouse import ClickHouseDialect
from stmtcraft.dialect.mysql import MySQLDialect
from stmtcraft.dialect.postgres import PostgresDialect
from stmtcraft.dialect.sqlite import SQLiteDialect

PEOPLE_DDL = """\
CREATE TABLE dbr_people (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT
)
"""


def render(stmt: Renderable, dialect: Dialect, interpolate: bool = False) -> tuple[str, list[Any]]:
    """Render into a fresh buffer and return ``(sql, params)``."""
    buf = Buffer(interpolate=interpolate)
    stmt.render(dialect, buf)
    return buf.sql, buf.params


@pytest.fixture
def mysql() -> MySQLDialect:
    return MySQLDialect()


@pytest.fixture
def postgres() -> PostgresDialect:
    return PostgresDialect()


@pytest.fixture
def sqlite() -> SQLiteDialect:
    return SQLiteDialect()


@pytest.fixture
def clickhouse() -> ClickHouseDialect:
    return ClickHouseDialect()


@pytest.fixture
def people_db() -> Iterator[sqlite3.Connection]:
    """In-memory SQLite database with an empty ``dbr_people`` table."""
    conn = sqlite3.connect(":memory:")
    conn.execute(PEOPLE_DDL)
    conn.commit()
    try:
        yield conn
    finally:
        conn.close()
