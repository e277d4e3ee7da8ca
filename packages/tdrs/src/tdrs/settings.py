"""Social engine configuration.

Loads from environment variables and .env file.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class TDRSSettings(BaseSettings):
    """Configuration for the social engine.

    All values can be set via environment variables or .env file.
    Prefix: TDRS_ (e.g. TDRS_STAT_ROUND_PRECISION=4).
    """

    # ----- Stats -----
    stat_round_precision: int = Field(
        default=3,
        ge=1,
        description="Significant figures kept for stat values and normalized values.",
    )
    stat_min_value: float = Field(
        default=-999999,
        description="Lower bound for stats created without an explicit minimum.",
    )
    stat_max_value: float = Field(
        default=999999,
        description="Upper bound for stats created without an explicit maximum.",
    )

    # ----- Logging -----
    log_level: str = Field(
        default="WARNING",
        description="Log level used by the command line runner.",
    )

    model_config = {
        "env_prefix": "TDRS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> TDRSSettings:
    """Get cached settings singleton."""
    return TDRSSettings()
