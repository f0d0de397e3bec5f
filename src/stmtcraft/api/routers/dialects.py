"""Dialect listing endpoint: GET /dialects."""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends

from stmtcraft.api.deps import get_settings
from stmtcraft.api.schemas import DialectInfo, DialectListResponse
from stmtcraft.dialect.registry import DialectRegistry
from stmtcraft.settings import Settings

router = APIRouter()


@router.get("", response_model=DialectListResponse)
async def list_dialects(
    settings: Annotated[Settings, Depends(get_settings)],
) -> DialectListResponse:
    """List all available SQL dialects, their capabilities and the default."""
    dialects = []
    for name in DialectRegistry.available():
        dialect = DialectRegistry.get(name)
        caps = asdict(dialect.capabilities)
        caps["supports_upsert"] = dialect.capabilities.supports_upsert
        dialects.append(DialectInfo(name=name, interpolate=dialect.interpolate, capabilities=caps))
    return DialectListResponse(default=settings.sql_dialect, dialects=dialects)
