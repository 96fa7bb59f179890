"""Configuration for the XMS client."""

from .settings import DEFAULT_ENDPOINT, Settings

__all__ = ["DEFAULT_ENDPOINT", "Settings"]
