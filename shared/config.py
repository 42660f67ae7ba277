"""
Runtime configuration.

Settings come from POS_* environment variables, with defaults suitable for
local use.
"""

import logging
import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field

from shared.storage import JsonFileStore, MemoryStore, StateStore


LOG_FORMAT = "%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


class AppConfig(BaseModel):
    """Process-level configuration for the engine and its HTTP adapter."""
    store: Literal["memory", "file"] = Field(default="file", description="Persistence backend")
    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Directory for JSON files")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        Build a config from environment variables.

        Unset variables keep their defaults. Invalid values raise
        pydantic.ValidationError.
        """
        env = os.environ if environ is None else environ
        values = {}
        mapping = {
            "POS_STORE": "store",
            "POS_DATA_DIR": "data_dir",
            "POS_LOG_LEVEL": "log_level",
            "POS_HOST": "host",
            "POS_PORT": "port",
        }
        for var, field_name in mapping.items():
            if env.get(var):
                values[field_name] = env[var]
        if "log_level" in values:
            values["log_level"] = values["log_level"].upper()
        return cls(**values)


def build_store(config: AppConfig) -> StateStore:
    """Create the persistence backend the config asks for."""
    if config.store == "memory":
        return MemoryStore()
    return JsonFileStore(data_dir=config.data_dir)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with the project's line format."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
