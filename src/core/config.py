"""Application configuration using Pydantic Settings."""

import json
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Error Tracking
    sentry_dsn: str | None = None
    """Sentry DSN for error tracking. Optional."""

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # History storage
    history_storage_url: str = "/tmp/buelldocs"
    """Storage URL for document history (file://, memory://, s3://, or local)."""

    history_namespace: str = "buelldocs_documents"
    """Namespace key under which each owner's history list is stored."""

    # Document generation
    generator_signature: str = "BuellDocs Professional Document Solutions"
    """Signature printed in every document footer."""

    generation_delay_seconds: float = 2.0
    """Simulated generation latency, for UI feedback only."""

    payment_delay_seconds: float = 2.0
    """Simulated payment latency. No payment processor is called."""

    document_price: Decimal = Decimal("9.99")
    """Price charged by the demo checkout for a single document."""

    # Payroll rates
    default_pay_period: str = "biweekly"
    """Pay period assumed when a request does not name one."""

    state_tax_rate: Decimal = Decimal("0.05")
    """Flat state withholding rate."""

    ss_wage_base: Decimal = Decimal("168600")
    """Annual Social Security wage cap applied by document calculations."""

    # Quality checks
    plausible_pay_min: Decimal = Decimal("15000")
    """Lowest annualized pay considered plausible."""

    plausible_pay_max: Decimal = Decimal("500000")
    """Highest annualized pay considered plausible."""

    tax_deviation_threshold: Decimal = Decimal("0.10")
    """Relative deviation from expected withholding that triggers a warning."""

    # NoDecode keeps pydantic-settings from forcing JSON parsing so the
    # value may be either a JSON array or a CSV string.
    cors_origins: Annotated[list[str], NoDecode] = DEFAULT_CORS_ORIGINS
    """Origins allowed to call the API from a browser."""

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> list[str]:
        """Parse CORS origins from JSON array, CSV, or list."""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DEFAULT_CORS_ORIGINS.copy()

            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None

            if isinstance(decoded, list):
                return _normalize_origins(decoded)
            if isinstance(decoded, str):
                text = decoded
            elif decoded is not None:
                raise ValueError(
                    "CORS_ORIGINS must be a JSON array or comma-separated string."
                )

            # Fallback: comma-separated values
            return _normalize_origins(item.strip() for item in text.split(","))

        if isinstance(value, (list, tuple, set)):
            return _normalize_origins(value)

        raise ValueError("CORS_ORIGINS must be a string, list, tuple, or set.")

    @field_validator("default_pay_period")
    @classmethod
    def normalize_pay_period(cls, value: str) -> str:
        """Lower-case the default pay period name."""
        return value.strip().lower()


def _normalize_origins(values: Iterable[object]) -> list[str]:
    """Normalize and dedupe origins while preserving declaration order."""
    normalized: list[str] = []
    seen: set[str] = set()
    for raw_item in values:
        item = str(raw_item).strip().strip("'").strip('"').rstrip("/")
        if not item or item in seen:
            continue
        normalized.append(item)
        seen.add(item)

    if not normalized:
        return DEFAULT_CORS_ORIGINS.copy()
    return normalized


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Numeric settings (rates, prices, delays) must be plain numbers.",
        "Allowed values for CORS_ORIGINS are:",
        '  1) ["http://localhost:5173","http://127.0.0.1:5173"]',
        "  2) http://localhost:5173,http://127.0.0.1:5173",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
