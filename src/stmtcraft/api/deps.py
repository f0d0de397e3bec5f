"""FastAPI dependencies backed by application state."""

from __future__ import annotations

from fastapi import Request

from stmtcraft.compiler.pipeline import RenderPipeline
from stmtcraft.settings import Settings


def get_settings(request: Request) -> Settings:
    """FastAPI ``Depends`` provider for the app's Settings."""
    settings: Settings = request.app.state.settings
    return settings


def get_pipeline(request: Request) -> RenderPipeline:
    """FastAPI ``Depends`` provider for the shared RenderPipeline."""
    pipeline: RenderPipeline = request.app.state.pipeline
    return pipeline
