"""Internal utilities: event loop bridging, JSON codec, HTTP and log sanitization."""

from .async_compat import LoopThread
from .codec import Codec, default_codec
from .security import sanitize_headers, sanitize_string, sanitize_url, setup_secure_logging

__all__ = [
    "LoopThread",
    "Codec",
    "default_codec",
    "sanitize_headers",
    "sanitize_string",
    "sanitize_url",
    "setup_secure_logging",
]
