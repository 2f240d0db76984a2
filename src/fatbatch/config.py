"""
Configuration management for fatbatch.

Supports configuration via environment variables and .env files.
"""

import re
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# PegNet token chain
PEGNET_CHAIN_ID = "cffce0f409ebba4ed236d49d89c70e4bd1f1367d86402a3363366683265a242d"

_CHAIN_ID = re.compile(r"^[0-9a-fA-F]{64}$")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class FatConfig(BaseSettings):
    """
    Configuration settings for building transactions and batches.

    All settings can be configured via environment variables with the FAT_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="FAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger settings
    token_chain_id: str = Field(
        default=PEGNET_CHAIN_ID,
        description="Chain id (64 hex characters) of the token chain batches are built for"
    )
    batch_version: int = Field(
        default=1,
        ge=1,
        description="Version number written into batch content"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @field_validator("token_chain_id")
    @classmethod
    def _check_chain_id(cls, value: str) -> str:
        if not _CHAIN_ID.match(value):
            raise ValueError("token_chain_id must be 64 hex characters")
        return value.lower()

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return value


# Global config instance
_config: Optional[FatConfig] = None


def get_config() -> FatConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = FatConfig()
    return _config


def set_config(config: Optional[FatConfig]) -> None:
    """Set (or with None, reset) the global configuration instance."""
    global _config
    _config = config
