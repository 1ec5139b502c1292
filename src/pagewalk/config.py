from __future__ import annotations

from typing import Any

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Remote limit/offset endpoint
    base_url: str | None = Field(default=None, validation_alias="PAGEWALK_BASE_URL")
    path: str = Field(default="/", validation_alias="PAGEWALK_PATH")
    items_field: str | None = Field(default=None, validation_alias="PAGEWALK_ITEMS_FIELD")
    limit_param: str = Field(default="limit", validation_alias="PAGEWALK_LIMIT_PARAM")
    offset_param: str = Field(default="offset", validation_alias="PAGEWALK_OFFSET_PARAM")
    timeout_seconds: float = Field(default=10.0, validation_alias="PAGEWALK_TIMEOUT_SECONDS")
    retry_attempts: int = Field(default=3, validation_alias="PAGEWALK_RETRY_ATTEMPTS")
    query_raw: str | None = Field(default=None, validation_alias="PAGEWALK_QUERY")

    # Cursor
    low_water_mark: int = Field(default=2, validation_alias="PAGEWALK_LOW_WATER_MARK")
    high_water_mark: int = Field(default=5, validation_alias="PAGEWALK_HIGH_WATER_MARK")

    # App
    start_index: int = Field(default=0, validation_alias="PAGEWALK_START_INDEX")
    walk_count: int = Field(default=10, validation_alias="PAGEWALK_WALK_COUNT")

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }

    @property
    def query(self) -> dict[str, Any]:
        """Parse PAGEWALK_QUERY ("status=open,sort=asc") into fetch params."""

        raw = (self.query_raw or "").strip()
        if not raw:
            return {}
        out: dict[str, Any] = {}
        for pair in raw.split(","):
            key, sep, value = pair.partition("=")
            key = key.strip()
            if not key:
                continue
            if not sep:
                raise ValueError(f"PAGEWALK_QUERY entry must be key=value: {pair!r}")
            out[key] = value.strip()
        return out

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv(override=False)
        return cls()
