from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic import ConfigDict, field_validator

ENV_BOOL_TRUE = {"1", "true", "yes", "on"}
INPUT_UNITS = {"yuan", "wanyuan"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ENV_BOOL_TRUE


class Settings(BaseModel):
    schedule_path: str | None = Field(default_factory=lambda: os.getenv("FEE_SCHEDULE_PATH") or None)
    schedule_name: str = Field(default_factory=lambda: os.getenv("FEE_SCHEDULE", "standard"))
    default_unit: Literal["yuan", "wanyuan"] = Field(
        default_factory=lambda: os.getenv("FEE_INPUT_UNIT", "wanyuan")
    )
    default_discount: str = Field(default_factory=lambda: os.getenv("FEE_DEFAULT_DISCOUNT", "100"))
    file_log_enabled: bool = Field(default_factory=lambda: _env_bool("FEATURE_FILE_LOG", False))
    log_dir: str = Field(default_factory=lambda: os.getenv("FEE_LOG_DIR", "logs"))
    build_version: str = Field(default_factory=lambda: os.getenv("BUILD_VERSION", "dev"))
    build_sha: str = Field(default_factory=lambda: os.getenv("BUILD_SHA", "local"))

    model_config = ConfigDict(frozen=True, validate_default=True)

    @field_validator("default_unit", mode="before")
    @classmethod
    def _normalize_unit(cls, value: str) -> str:
        lower = (value or "wanyuan").strip().lower()
        if lower not in INPUT_UNITS:
            raise ValueError(f"FEE_INPUT_UNIT must be yuan or wanyuan, got {value}")
        return lower

    @field_validator("schedule_name")
    @classmethod
    def _default_schedule_name(cls, value: str) -> str:
        return value.strip() or "standard"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
