"""Client for the CLX XMS messaging REST API.

Typical use::

    from clx_xms import ApiConnection, MtBatchTextSmsCreate

    with ApiConnection.from_settings() as conn:
        batch = conn.create_batch(
            MtBatchTextSmsCreate(sender="12345", to=["987654321"], body="Hello")
        )
"""

from .call_context import Callback, CallContext, FutureCallback
from .config import DEFAULT_ENDPOINT, Settings
from .connection import ApiConnection
from .exceptions import (
    ApiResponseError,
    CallCancelledError,
    CallTimeoutError,
    ConfigurationError,
    ConnectionClosedError,
    DecodeError,
    InvalidArgumentError,
    TransportError,
    UnexpectedResponseError,
    XmsError,
)
from .models import *  # noqa: F401,F403
from .models import __all__ as _models_all
from .paging import PagedFetcher

__version__ = "0.1.0"

__all__ = [
    "ApiConnection",
    "PagedFetcher",
    "CallContext",
    "Callback",
    "FutureCallback",
    "Settings",
    "DEFAULT_ENDPOINT",
    # Errors
    "XmsError",
    "TransportError",
    "DecodeError",
    "ApiResponseError",
    "UnexpectedResponseError",
    "ConnectionClosedError",
    "InvalidArgumentError",
    "CallTimeoutError",
    "CallCancelledError",
    "ConfigurationError",
] + list(_models_all)
