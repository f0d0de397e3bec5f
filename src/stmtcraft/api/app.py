"""FastAPI application factory for stmtcraft."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stmtcraft import __version__
from stmtcraft.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from stmtcraft.api.routers import dialects, render
from stmtcraft.api.schemas import ErrorResponse, HealthResponse
from stmtcraft.compiler.pipeline import RenderPipeline
from stmtcraft.errors import StmtcraftError
from stmtcraft.settings import Settings

logger = logging.getLogger("stmtcraft.api")


async def _stmtcraft_error_handler(request: Request, exc: StmtcraftError) -> JSONResponse:
    logger.info("render failed on %s: %s", request.url.path, exc.message)
    body = ErrorResponse(error=exc.code, message=exc.message)
    return JSONResponse(status_code=422, content=body.model_dump())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="stmtcraft",
        description="Renders statement descriptions to dialect-specific SQL.",
        version=__version__,
    )
    app.state.settings = settings
    app.state.pipeline = RenderPipeline(settings)

    # Middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestBodyLimitMiddleware)

    app.add_exception_handler(StmtcraftError, _stmtcraft_error_handler)  # type: ignore[arg-type]

    app.include_router(render.router, prefix="/render", tags=["render"])
    app.include_router(dialects.router, prefix="/dialects", tags=["dialects"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "stmtcraft API server v%s starting (host=%s, port=%d, dialect=%s)",
        __version__, settings.api_server_host, settings.effective_port, settings.sql_dialect,
    )

    uvicorn.run(
        "stmtcraft.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
