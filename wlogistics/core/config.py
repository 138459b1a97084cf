"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
The backend needs very little: where to listen, which browser origins may
call it, and a handful of business knobs for the order lifecycle.

Usage:
    from wlogistics.core.config import get_settings

    settings = get_settings()
    print(settings.api_port)

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local demo, seeded orders and permissive CORS
        STAGING: Pre-production deployment
        PRODUCTION: Live deployment
    """
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.

    Attributes:
        env_mode: Current environment (development/staging/production)
        debug: Enable verbose logging and error details

        api_host: Host to bind the API server
        api_port: Port for the API server (PORT is honoured too)
        cors_origins: Comma-separated browser origins allowed to call the API

        eta_hours: Hours added to creation time for the order ETA
        order_code_prefix: Prefix of generated human-readable order codes
        order_code_start: First number used for generated order codes
        allow_assign_rewind: Whether assigning a driver resets status to Assigned
        strict_order_validation: Reject creates without tenant and customer
        seed_demo_orders: Populate the store with demo orders at startup
        event_history_size: Published events kept for inspection
        realtime_send_timeout: Per-subscriber send bound before a client is dropped
        driver_roster: Comma-separated Name:Plate entries handed out on assign
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="WLogistics Order Tracking",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8080,
        validation_alias=AliasChoices("api_port", "port"),
        description="API server port"
    )
    cors_origins: str = Field(
        default="http://localhost:5173,https://w-logistics-frontend.vercel.app",
        description="Comma-separated list of allowed browser origins"
    )

    # ==========================================================================
    # ORDER LIFECYCLE
    # ==========================================================================

    eta_hours: float = Field(
        default=4.0,
        ge=0,
        description="Hours between order creation and its ETA"
    )
    order_code_prefix: str = Field(
        default="WL-",
        description="Prefix for generated order codes"
    )
    order_code_start: int = Field(
        default=10001,
        ge=0,
        description="First number of generated order codes"
    )
    allow_assign_rewind: bool = Field(
        default=True,
        description="Assigning a driver resets status to Assigned even past it"
    )
    strict_order_validation: bool = Field(
        default=False,
        description="Require tenantId and customer name/phone on create"
    )
    seed_demo_orders: bool = Field(
        default=True,
        description="Seed demo orders for every tenant at startup"
    )

    # ==========================================================================
    # REALTIME
    # ==========================================================================

    event_history_size: int = Field(
        default=200,
        ge=0,
        description="Number of published events kept for inspection"
    )
    realtime_send_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Seconds a websocket client may take to accept one event before it is dropped"
    )

    # ==========================================================================
    # DRIVERS
    # ==========================================================================

    driver_roster: str = Field(
        default=(
            "Nguyen Van An:59A-123.45,"
            "Tran Thi Binh:51F-678.90,"
            "Le Hoang Cuong:59C-246.80"
        ),
        description="Comma-separated Name:Plate entries used for auto-assign"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def cors_origins_list(self) -> list[str]:
        """Get allowed origins as a list, trailing slashes removed."""
        return [o.strip().rstrip("/") for o in self.cors_origins.split(",") if o.strip()]

    @property
    def driver_roster_list(self) -> list[tuple[str, str]]:
        """Get the driver roster as (name, plate) pairs."""
        roster = []
        for entry in self.driver_roster.split(","):
            name, _, plate = entry.strip().partition(":")
            if name.strip() and plate.strip():
                roster.append((name.strip(), plate.strip()))
        return roster


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are read from the environment once per process; call
    ``get_settings.cache_clear()`` after changing the environment.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Quiet the per-request access lines and websocket frame chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logging.getLogger("wlogistics")
