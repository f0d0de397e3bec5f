"""Statement rendering pipeline for stmtcraft."""

from stmtcraft.compiler.codegen import CodeGenerator, to_sql
from stmtcraft.compiler.pipeline import RenderPipeline, RenderResult, format_sql
from stmtcraft.compiler.validator import validate_sql

__all__ = [
    "CodeGenerator",
    "RenderPipeline",
    "RenderResult",
    "format_sql",
    "to_sql",
    "validate_sql",
]
