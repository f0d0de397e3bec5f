"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Rendering defaults and REST API server options.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # Rendering
    sql_dialect: str = "mysql"
    sql_interpolate: bool | None = None  # None = follow the dialect's own policy
    sql_validate: bool = False  # parse rendered SQL with sqlglot and report warnings
    sql_pretty: bool = False  # reformat rendered SQL with sqlparse

    # REST API
    api_server_host: str = "localhost"
    api_server_port: int = 8000
    port: int | None = None  # PORT from the hosting platform wins over api_server_port

    @property
    def effective_port(self) -> int:
        """Port the API server binds to."""
        return self.port if self.port is not None else self.api_server_port
