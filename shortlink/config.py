"""Configuration management for the short link engine."""

import ipaddress
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    host: str = Field(
        default="127.0.0.1",
        description="Loopback address the redirect server binds to"
    )

    port: int = Field(
        default=0,
        ge=0,
        le=65535,
        description="Port to listen on (0 lets the OS pick a free port)"
    )

    public_host: str = Field(
        default="localhost",
        description="Host name used when composing short URLs"
    )

    # Short link settings
    route_prefix: str = Field(
        default="wnk",
        min_length=1,
        description="First path segment of short links (e.g., 'wnk' for /wnk/abc123)"
    )

    token_length: int = Field(
        default=6,
        ge=1,
        description="Length of generated tokens"
    )

    # Lifecycle settings
    startup_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for the redirect server to start"
    )

    shutdown_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Maximum seconds stop() waits for the server thread"
    )

    drain_timeout: float = Field(
        default=0.0,
        ge=0,
        description="Seconds in-flight requests may drain on stop. 0 = abandon them."
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_prefix": "SHORTLINK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("host")
    @classmethod
    def validate_loopback(cls, v: str) -> str:
        """Only loopback addresses are allowed."""
        if v == "localhost":
            return v
        try:
            address = ipaddress.ip_address(v)
        except ValueError:
            raise ValueError(f"host must be a loopback address, got '{v}'")
        if not address.is_loopback:
            raise ValueError(f"host must be a loopback address, got '{v}'")
        return v

    @field_validator("route_prefix")
    @classmethod
    def validate_route_prefix(cls, v: str) -> str:
        """Route prefix is a single path segment."""
        prefix = v.strip("/")
        if not prefix or "/" in prefix:
            raise ValueError("route_prefix must be a single path segment")
        return prefix

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got '{v}'")
        return level


def load_config(**overrides) -> Config:
    """Load configuration from environment."""
    return Config(**overrides)
