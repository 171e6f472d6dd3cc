"""Network module for tinyresp."""

from .connection import RedisConnection

__all__ = ["RedisConnection"]
