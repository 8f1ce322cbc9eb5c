"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - Every setting overridable through FUNKO_* environment variables or .env
    - get_settings() is cached (lru_cache) - single instance per process
    - storage_root is always absolute once validated

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults reproduce the historical deployment: port 60300, ./datos storage,
      no per-user write serialization, malformed requests answered as "list"
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 60300


class Settings(BaseSettings):
    """Server settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="FUNKO_", case_sensitive=False,
    )

    # Network
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    read_chunk_size: int = 65_536

    # Storage
    storage_root: Path = Path("datos")

    @field_validator("storage_root", mode="after")
    @classmethod
    def resolve_storage_root(cls, v: Path) -> Path:
        """Relative roots are anchored at the working directory at startup."""
        return v.expanduser().resolve()

    # Concurrency hardening - closes the check-then-write race per user
    serialize_user_writes: bool = False

    # Kind echoed when a frame cannot be decoded at all
    malformed_request_kind: str = "list"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
