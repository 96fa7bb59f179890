"""HTTP utilities public API (barrel module).

This package provides:
- The pooled transport and its timeout/limit helpers
- Request construction and the raw exchange record
- Classification of exchanges into results or errors

Recommended import pattern for consumers:
    from clx_xms.utils.http import Transport, build_request, classify
"""

from .classifier import classify
from .request import RawExchange, build_request
from .transport import Transport, create_limits, create_timeout

__all__ = [
    "Transport",
    "create_timeout",
    "create_limits",
    "RawExchange",
    "build_request",
    "classify",
]
