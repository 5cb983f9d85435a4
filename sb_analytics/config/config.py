"""Configuration management for the analytics service."""

import re
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings


REQUIRED_VARS = [
    "DATABASE_URL",
]

_RELATION_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class Config(BaseSettings):
    """Application configuration from environment variables."""

    # Required
    database_url: str

    # Source relations
    canonical_awards_relation: str = "public.usaspending_awards_v1"
    fast_awards_relation: str = "public.usaspending_awards_fast"
    canonical_subawards_relation: str = "public.usaspending_contract_subawards"
    fast_subawards_relation: str = "public.usaspending_subawards_fast"
    # Point the fast side at a materialized copy when one exists
    canonical_agency_share_relation: str = "public.sb_agency_share"
    fast_agency_share_relation: str = "public.sb_agency_share"

    # Timeouts
    connect_timeout_seconds: int = 15
    statement_timeout_seconds: float = 20.0
    probe_timeout_seconds: float = 1.5

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "case_sensitive": False}

    @field_validator(
        "canonical_awards_relation",
        "fast_awards_relation",
        "canonical_subawards_relation",
        "fast_subawards_relation",
        "canonical_agency_share_relation",
        "fast_agency_share_relation",
    )
    @classmethod
    def relation_name(cls, v: str) -> str:
        """Relation names are spliced into SQL, so only plain identifiers pass."""
        if not _RELATION_PATTERN.match(v):
            raise ValueError(f"Invalid relation name: {v!r}")
        return v


def missing_vars(exc: ValidationError) -> list[str]:
    """Required variables reported as missing in a settings validation error."""
    missing_fields = {
        str(error["loc"][0]).upper()
        for error in exc.errors()
        if error.get("type") == "missing" and error.get("loc")
    }
    return [var for var in REQUIRED_VARS if var in missing_fields]


def validate_config() -> Config:
    """Load and validate configuration from environment.

    Raises ValueError with descriptive message listing ALL missing
    required variables (not just the first one). Other validation
    errors propagate unchanged.
    """
    try:
        return Config()  # type: ignore[call-arg]
    except ValidationError as exc:
        missing = missing_vars(exc)
        if missing:
            names = ", ".join(missing)
            raise ValueError(
                f"Missing required environment variable(s): {names}. "
                "Please set them in your .env file or environment."
            ) from exc
        raise


def load_config() -> Config:
    """Load configuration from environment (startup entry point)."""
    return validate_config()
