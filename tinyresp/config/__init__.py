"""Configuration module for tinyresp."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
