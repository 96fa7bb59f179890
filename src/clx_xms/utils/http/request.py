"""HTTP request construction and the raw exchange record.

Every API call is built by :func:`build_request` so that each one
carries the same authentication and content negotiation headers.
"""

from typing import Optional, Sequence, Tuple

import httpx

from ..codec import JSON_CONTENT_TYPE


def build_request(
    method: str,
    url: str,
    token: str,
    params: Optional[Sequence[Tuple[str, str]]] = None,
    body: Optional[bytes] = None,
) -> httpx.Request:
    """Build one authenticated API request.

    :param method: HTTP method (e.g., 'GET', 'POST', 'DELETE')
    :type method: str
    :param url: Absolute request URL
    :type url: str
    :param token: Bearer token
    :type token: str
    :param params: Optional ordered query parameters
    :type params: Optional[Sequence[Tuple[str, str]]]
    :param body: Optional JSON body
    :type body: Optional[bytes]
    :return: The request, ready to be sent
    :rtype: httpx.Request
    """
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": JSON_CONTENT_TYPE,
    }
    if body is not None:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return httpx.Request(
        method,
        url,
        params=list(params) if params else None,
        headers=headers,
        content=body,
    )


class RawExchange:
    """Outcome of sending one request: a response or a transport error.

    Exactly one of ``response`` and ``error`` is set. The exchange
    belongs to the call that produced it and is never shared.
    """

    def __init__(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response] = None,
        error: Optional[Exception] = None,
    ):
        if (response is None) == (error is None):
            raise ValueError("RawExchange needs exactly one of response or error")
        self.request = request
        self.response = response
        self.error = error

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status code, None if no response was received."""
        return self.response.status_code if self.response is not None else None

    @property
    def headers(self) -> httpx.Headers:
        if self.response is None:
            return httpx.Headers()
        return self.response.headers

    @property
    def content(self) -> bytes:
        if self.response is None:
            return b""
        return self.response.content

    def is_client_error(self) -> bool:
        """Check if the response indicates a client error (4xx status code).

        :return: True if status code is in 400-499 range
        :rtype: bool
        """
        return self.status_code is not None and 400 <= self.status_code < 500

    def __repr__(self) -> str:
        outcome = (
            f"status={self.status_code}"
            if self.response is not None
            else f"error={type(self.error).__name__}"
        )
        return f"<RawExchange {self.request.method} {self.request.url.path} {outcome}>"
