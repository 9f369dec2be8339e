"""
Configuration for docdb.

Uses pydantic-settings for environment variable loading. Every setting has
a default suitable for local development; override with DOCDB_* variables,
e.g. DOCDB_PORT=9000 or DOCDB_INITIAL_COLLECTIONS='["users","tasks"]'.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """docdb configuration loaded from environment."""

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, description="Bind port")
    api_prefix: str = Field(default="", description="Prefix for all API routes, e.g. /api")

    # CORS settings
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")
    log_format: str = Field(default="text", description="Log format: text or json")

    # Import limits
    max_import_bytes: int = Field(
        default=16 * 1024 * 1024,
        description="Largest accepted import upload in bytes",
    )

    # Collections created at startup
    initial_collections: list[str] = Field(default_factory=list)

    model_config = {"env_prefix": "DOCDB_"}
