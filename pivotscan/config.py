"""
pivotscan/config.py

Application configuration via Pydantic Settings.
All values can be overridden with environment variables or a .env file.

Quick start: create a .env file in your project root:
    KEY_SEPARATOR=|
    FLOAT_PRECISION=6
    CSV_DELIMITER=,
    LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Grouping
    KEY_SEPARATOR: str = "|"

    # Output table
    FLOAT_PRECISION: int = 6   # six decimals, e.g. "150.000000"
    CSV_DELIMITER: str = ","
    CSV_ENCODING: str = "utf-8"

    # Streaming scan
    DEFAULT_MAX_ROWS: int = -1   # -1 = scan every row
    PROGRESS_LOG_EVERY: int = 1_000_000

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("KEY_SEPARATOR", "CSV_DELIMITER")
    @classmethod
    def non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("FLOAT_PRECISION")
    @classmethod
    def precision_range(cls, v: int) -> int:
        if not 0 <= v <= 17:
            raise ValueError(f"FLOAT_PRECISION must be within 0..17, got {v}")
        return v

    @field_validator("DEFAULT_MAX_ROWS")
    @classmethod
    def max_rows_bound(cls, v: int) -> int:
        if v < -1:
            raise ValueError(f"DEFAULT_MAX_ROWS must be -1 or a non-negative bound, got {v}")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def upper_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


settings = Settings()
