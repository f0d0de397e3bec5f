"""ClickHouse dialect implementation."""

from __future__ import annotations

from stmtcraft.dialect.base import Dialect, DialectCapabilities
from stmtcraft.dialect.registry import DialectRegistry


@DialectRegistry.register
class ClickHouseDialect(Dialect):
    """ClickHouse dialect. No transactions or upserts; literals are inlined by default."""

    identifier_quotes = ("`", "`")
    string_escapes = {
        "\x00": "\\0",
        "\b": "\\b",
        "\f": "\\f",
        "\n": "\\n",
        "\r": "\\r",
        "\t": "\\t",
        "\\": "\\\\",
        "'": "\\'",
    }
    bool_literals = ("1", "0")
    # DateTime columns hold whole seconds.
    datetime_format = "%Y-%m-%d %H:%M:%S"
    interpolate = True

    @property
    def name(self) -> str:
        return "clickhouse"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            upsert_style=None,
            supports_transactions=False,
            supports_returning=False,
            supports_full_join=True,
            supports_sourceless_select=True,
            supports_offset_without_limit=True,
            backslash_escapes=True,
        )

    def encode_bytes(self, value: bytes) -> str:
        return f"unhex('{value.hex()}')"
