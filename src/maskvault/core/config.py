# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core configuration - centralized config for the maskvault package.

All environment-based configuration should flow through this module.

Usage:
    from maskvault.core.config import get_config
    config = get_config()

    site = config.site_origin
    log_level = config.log_level
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigException


class CoreSettings(BaseSettings):
    """Core configuration settings for maskvault.

    Settings can be configured via environment variables with the
    MASKVAULT_ prefix or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # SITE SETTINGS
    # ==========================================================================

    site_origin: str = Field(
        default="https://maskvault.app",
        description="Origin of the application site (protected methods, implicit session)",
        validation_alias="MASKVAULT_SITE_ORIGIN",
    )

    # ==========================================================================
    # STATE STORE SETTINGS
    # ==========================================================================

    state_path: str = Field(
        default=str(Path.home() / ".maskvault" / "state.bin"),
        description="Path of the encrypted state blob",
        validation_alias="MASKVAULT_STATE_PATH",
    )
    state_key: str | None = Field(
        default=None,
        description="Fernet key (urlsafe base64) protecting the state blob",
        validation_alias="MASKVAULT_STATE_KEY",
    )

    # ==========================================================================
    # ENTROPY SETTINGS
    # ==========================================================================

    seed_hex: str | None = Field(
        default=None,
        description="Hex-encoded user seed for the local entropy source",
        validation_alias="MASKVAULT_SEED",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="MASKVAULT_LOG_LEVEL",
    )
    log_format: str = Field(
        default="text",
        description="Log format: 'json' or 'text'",
        validation_alias="MASKVAULT_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="MASKVAULT_LOG_FILE",
    )

    @field_validator("site_origin")
    @classmethod
    def _canonical_site_origin(cls, value: str) -> str:
        from ..identity.models import canonical_origin

        return canonical_origin(value)

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def seed(self) -> bytes:
        """Decoded user seed.

        Raises:
            ConfigException: If the seed is unset or not valid hex.
        """
        if not self.seed_hex:
            raise ConfigException("User seed is not configured", missing_vars=["MASKVAULT_SEED"])
        try:
            return bytes.fromhex(self.seed_hex)
        except ValueError as e:
            raise ConfigException(f"MASKVAULT_SEED is not valid hex: {e}") from e

    @property
    def state_key_bytes(self) -> bytes:
        """Fernet key for the state store.

        Raises:
            ConfigException: If the key is unset.
        """
        if not self.state_key:
            raise ConfigException("State encryption key is not configured", missing_vars=["MASKVAULT_STATE_KEY"])
        return self.state_key.encode()


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.

    Raises:
        ConfigException: If an environment variable holds an invalid value.
    """
    global _config
    if _config is None:
        try:
            _config = CoreSettings()
        except ValidationError as e:
            first = e.errors()[0]
            name = ".".join(str(part) for part in first.get("loc", ()))
            raise ConfigException(f"Invalid configuration {name}: {first.get('msg', e)}") from e
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
