from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .times import ParseError, Time, TimeRole


# The printed form has 22 rows and must stay a single page.
DEFAULT_MAX_ENTRY_SLOTS = 22
DEFAULT_CONTRACTUAL_WORKING_TIME = "39:00"


@dataclass(frozen=True, slots=True)
class Limits:
    """Per-month figures handed explicitly to the checker and reconciler."""

    contractual_working_time: Time
    max_entry_slots: int = DEFAULT_MAX_ENTRY_SLOTS
    vacation_nominal_time: Time = Time(0, 0)
    warn_on_hours_mismatch: bool = True


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TS_", case_sensitive=False)
    """Application runtime configuration."""

    app_name: str = "Monthsheet"
    environment: str = "development"
    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: str = ""

    contractual_working_time: str = DEFAULT_CONTRACTUAL_WORKING_TIME
    max_entry_slots: int = DEFAULT_MAX_ENTRY_SLOTS
    vacation_nominal_time: str = "00:00"
    warn_on_hours_mismatch: bool = True

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @field_validator("contractual_working_time", "vacation_nominal_time")
    @classmethod
    def _validate_duration(cls, value: str) -> str:
        try:
            parsed = Time.parse(value, TimeRole.DURATION)
        except ParseError as exc:
            raise ValueError(str(exc)) from exc
        if parsed.is_negative():
            raise ValueError(f"Duration must not be negative: {value!r}")
        return parsed.to_string()

    @field_validator("max_entry_slots")
    @classmethod
    def _validate_slots(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_entry_slots must not be negative")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.strip().upper()

    def allowed_origins(self) -> List[str]:
        """Comma separated ``TS_CORS_ORIGINS``; empty disables CORS."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def limits(self) -> Limits:
        return Limits(
            contractual_working_time=Time.parse(self.contractual_working_time, TimeRole.DURATION),
            max_entry_slots=self.max_entry_slots,
            vacation_nominal_time=Time.parse(self.vacation_nominal_time, TimeRole.DURATION),
            warn_on_hours_mismatch=self.warn_on_hours_mismatch,
        )


settings = Settings()
