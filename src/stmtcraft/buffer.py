"""Render target: SQL text plus, for parameterized renders, the bound values."""

from __future__ import annotations

from typing import Any

from stmtcraft.errors import ArgumentError


class Buffer:
    """Accumulates rendered SQL text and an ordered parameter list.

    A buffer is created in one mode and stays there: an interpolating buffer
    never holds parameters, a parameterized one receives one parameter per
    placeholder written into its text.
    """

    def __init__(self, interpolate: bool = False) -> None:
        self._interpolate = interpolate
        self._parts: list[str] = []
        self._params: list[Any] = []

    @property
    def interpolate(self) -> bool:
        return self._interpolate

    def write(self, text: str) -> None:
        self._parts.append(text)

    def add_param(self, value: Any) -> int:
        """Append a bound value and return its 1-based position."""
        if self._interpolate:
            raise ArgumentError("Interpolating buffer cannot hold parameters")
        self._params.append(value)
        return len(self._params)

    @property
    def sql(self) -> str:
        return "".join(self._parts)

    @property
    def params(self) -> list[Any]:
        return list(self._params)

    def __str__(self) -> str:
        return self.sql
