"""
tinyresp Configuration Settings

This module contains the configuration constants used by the connection
and the interactive console. Every value can be overridden from the
environment.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("TINYRESP_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("TINYRESP_PORT", "6379"))

    # Connection settings
    READ_BUFFER_SIZE: int = int(os.environ.get("TINYRESP_READ_BUFFER_SIZE", "4096"))
    CONNECT_TIMEOUT: float = float(os.environ.get("TINYRESP_CONNECT_TIMEOUT", "5"))
    READ_TIMEOUT: float = float(os.environ.get("TINYRESP_READ_TIMEOUT", "30"))
    RETRIES: int = int(os.environ.get("TINYRESP_RETRIES", "1"))  # Extra attempts after an I/O failure

    # Console settings
    PROMPT: str = "redis > "

    # Logging settings
    DEBUG: bool = os.environ.get("TINYRESP_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("TINYRESP_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
