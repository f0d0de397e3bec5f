"""SQL dialect plugin system for stmtcraft."""

# Import dialects to trigger registration
import stmtcraft.dialect.clickhouse as _clickhouse  # noqa: F401
import stmtcraft.dialect.mysql as _mysql  # noqa: F401
import stmtcraft.dialect.postgres as _postgres  # noqa: F401
import stmtcraft.dialect.sqlite as _sqlite  # noqa: F401
from stmtcraft.dialect.base import Dialect, DialectCapabilities, UpsertStyle
from stmtcraft.dialect.registry import DialectRegistry, UnsupportedDialectError

__all__ = [
    "Dialect",
    "DialectCapabilities",
    "DialectRegistry",
    "UnsupportedDialectError",
    "UpsertStyle",
]
