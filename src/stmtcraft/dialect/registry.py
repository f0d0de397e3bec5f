"""Dialect plugin registry."""

from __future__ import annotations

from stmtcraft.dialect.base import Dialect


class UnsupportedDialectError(Exception):
    """Raised when a requested dialect is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.dialect_name = name
        self.available = available
        super().__init__(f"Unsupported dialect '{name}'. Available: {', '.join(available)}")


class DialectRegistry:
    """Registry for SQL dialect plugins.

    Dialects hold no mutable state, so one shared instance per name is handed
    out to every caller.
    """

    _dialects: dict[str, Dialect] = {}

    @classmethod
    def register(cls, dialect_class: type[Dialect]) -> type[Dialect]:
        """Register a dialect class. Can be used as a decorator."""
        instance = dialect_class()
        cls._dialects[instance.name] = instance
        return dialect_class

    @classmethod
    def get(cls, name: str) -> Dialect:
        """Get the named dialect."""
        key = name.lower()
        if key not in cls._dialects:
            raise UnsupportedDialectError(name, available=cls.available())
        return cls._dialects[key]

    @classmethod
    def available(cls) -> list[str]:
        """List registered dialect names."""
        return sorted(cls._dialects.keys())
