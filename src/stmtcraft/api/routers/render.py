"""Statement rendering endpoint: POST /render."""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from stmtcraft.api.convert import build_statement
from stmtcraft.api.deps import get_pipeline
from stmtcraft.api.schemas import ErrorResponse, RenderRequest, RenderResponse
from stmtcraft.compiler.pipeline import RenderPipeline
from stmtcraft.dialect.registry import UnsupportedDialectError

router = APIRouter()


@router.post(
    "",
    response_model=RenderResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def render_statement(
    body: RenderRequest,
    pipeline: Annotated[RenderPipeline, Depends(get_pipeline)],
) -> RenderResponse:
    """Render a JSON statement description to SQL for one dialect."""
    stmt = build_statement(body.statement)
    try:
        result = pipeline.render(
            stmt,
            dialect_name=body.dialect,
            interpolate=body.interpolate,
            validate=body.validate_sql,
            pretty=body.pretty,
        )
    except UnsupportedDialectError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None
    return RenderResponse(**asdict(result))
