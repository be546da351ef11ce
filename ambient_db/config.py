"""
Configuration for ambient-db.

Settings are read from environment variables prefixed with AMBIENT_DB_,
e.g. AMBIENT_DB_BACKEND=firestore. Every setting has a default suitable for
local development and tests (in-memory backend).

Secrets are never part of this configuration: the Firestore adapter uses
the ambient Google credentials of the process.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class StoreBackend(Enum):
    """Supported document store backends."""

    MEMORY = "memory"
    FIRESTORE = "firestore"


class Settings(BaseSettings):
    """ambient-db configuration."""

    backend: StoreBackend = Field(default=StoreBackend.MEMORY)

    # Firestore
    project_id: Optional[str] = Field(default=None)
    database: str = Field(default="(default)")
    emulator_host: Optional[str] = Field(
        default=None, description="host:port of a Firestore emulator"
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["text", "json"] = Field(default="text")

    model_config = {"env_prefix": "AMBIENT_DB_"}
