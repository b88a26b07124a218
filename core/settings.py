from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from affordability.presets import AffordabilityConfig

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    estimate_delay_seconds: float = 0.8
    ui_language: str = "en"
    default_loan_amount: float = 0.0
    default_loan_term_months: int = 12
    affordability_threshold: float = 0.40
    minimum_job_tenure_months: int = 3
    annual_rate_percent: float = 12.0

    def affordability_config(self) -> AffordabilityConfig:
        return AffordabilityConfig(
            affordability_threshold=self.affordability_threshold,
            minimum_job_tenure_months=self.minimum_job_tenure_months,
            annual_rate_percent=self.annual_rate_percent,
        )

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


_settings: Settings | None = None


def _validate_settings(settings: Settings) -> None:
    if settings.log_level not in VALID_LOG_LEVELS:
        allowed = ", ".join(sorted(VALID_LOG_LEVELS))
        raise ValueError(f"Invalid LOG_LEVEL '{settings.log_level}'. Expected one of: {allowed}.")

    if settings.estimate_delay_seconds < 0:
        raise ValueError("ESTIMATE_DELAY_SECONDS must be >= 0.")

    if not settings.ui_language.strip():
        raise ValueError("UI_LANGUAGE must be set and non-empty.")

    if settings.default_loan_amount < 0:
        raise ValueError("DEFAULT_LOAN_AMOUNT must be >= 0.")

    if settings.default_loan_term_months <= 0:
        raise ValueError("DEFAULT_LOAN_TERM_MONTHS must be > 0.")

    if not 0 < settings.affordability_threshold <= 1:
        raise ValueError("AFFORDABILITY_THRESHOLD must be in (0, 1].")

    if settings.minimum_job_tenure_months < 0:
        raise ValueError("MIN_JOB_TENURE_MONTHS must be >= 0.")

    if settings.annual_rate_percent < 0:
        raise ValueError("ANNUAL_RATE_PERCENT must be >= 0.")


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got '{raw}'.") from exc


def get_settings() -> Settings:
    global _settings

    if _settings is None:
        candidate = Settings(
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
            estimate_delay_seconds=_env_number("ESTIMATE_DELAY_SECONDS", "0.8", float),
            ui_language=os.getenv("UI_LANGUAGE", "en"),
            default_loan_amount=_env_number("DEFAULT_LOAN_AMOUNT", "0", float),
            default_loan_term_months=_env_number("DEFAULT_LOAN_TERM_MONTHS", "12", int),
            affordability_threshold=_env_number("AFFORDABILITY_THRESHOLD", "0.40", float),
            minimum_job_tenure_months=_env_number("MIN_JOB_TENURE_MONTHS", "3", int),
            annual_rate_percent=_env_number("ANNUAL_RATE_PERCENT", "12.0", float),
        )
        _validate_settings(candidate)
        _settings = candidate

    return _settings


def clear_settings_cache() -> None:
    global _settings
    _settings = None
