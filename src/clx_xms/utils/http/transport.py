"""HTTP transport with connection pooling and lifecycle management.

The transport owns a single ``httpx.AsyncClient``. Its connection pool
is bounded by ``httpx.Limits``; requests beyond ``max_connections`` wait
inside httpx for a free connection. The transport never retries and
never raises for a failed request (any ``httpx.RequestError``): the
failure is recorded on the returned :class:`RawExchange` for the
classifier to interpret.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx

from ..security import sanitize_url
from .request import RawExchange

logger = logging.getLogger(__name__)


def create_timeout(
    connect: float = 5.0,
    read: float = 30.0,
    write: float = 10.0,
    pool: Optional[float] = None,
) -> httpx.Timeout:
    """Create a timeout configuration object.

    :param connect: Connection timeout in seconds
    :type connect: float
    :param read: Read timeout in seconds
    :type read: float
    :param write: Write timeout in seconds
    :type write: float
    :param pool: Pool timeout in seconds, None to wait for a connection forever
    :type pool: Optional[float]
    :return: Configured timeout object
    :rtype: httpx.Timeout
    """
    return httpx.Timeout(connect=connect, read=read, write=write, pool=pool)


def create_limits(
    max_keepalive_connections: int = 10,
    max_connections: int = 20,
    keepalive_expiry: float = 30.0,
) -> httpx.Limits:
    """Create a connection limits configuration object.

    :param max_keepalive_connections: Maximum number of keepalive connections
    :type max_keepalive_connections: int
    :param max_connections: Maximum total number of connections
    :type max_connections: int
    :param keepalive_expiry: Keepalive connection expiry time in seconds
    :type keepalive_expiry: float
    :return: Configured limits object
    :rtype: httpx.Limits
    """
    return httpx.Limits(
        max_keepalive_connections=max_keepalive_connections,
        max_connections=max_connections,
        keepalive_expiry=keepalive_expiry,
    )


class Transport:
    """Issues single HTTP requests over a pooled ``httpx.AsyncClient``.

    The client is created lazily by :meth:`open` so it is bound to the
    event loop that will drive it.

    :param timeout: Optional custom timeout configuration
    :type timeout: Optional[httpx.Timeout]
    :param limits: Optional custom connection limits
    :type limits: Optional[httpx.Limits]
    :param transport: Optional httpx transport, e.g. ``httpx.MockTransport``
    :type transport: Optional[httpx.AsyncBaseTransport]
    """

    def __init__(
        self,
        timeout: Optional[httpx.Timeout] = None,
        limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        self._client_config: Dict[str, Any] = {
            "timeout": timeout or create_timeout(),
            "limits": limits or create_limits(),
            "follow_redirects": False,
            **kwargs,
        }
        if transport is not None:
            self._client_config["transport"] = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def open(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(**self._client_config)
        limits: httpx.Limits = self._client_config["limits"]
        logger.debug(
            "Created HTTP client (max_connections=%s, max_keepalive=%s)",
            limits.max_connections,
            limits.max_keepalive_connections,
        )

    async def execute(self, request: httpx.Request) -> RawExchange:
        """Send one request and read its full response.

        :param request: Fully built request
        :type request: httpx.Request
        :return: The exchange, holding either a response or a transport error
        :rtype: RawExchange
        """
        if self._client is None:
            raise RuntimeError("Transport is not open")
        started = time.monotonic()
        try:
            response = await self._client.send(request)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - started) * 1000
            logger.debug(
                "%s %s failed after %.1fms: %s",
                request.method,
                sanitize_url(str(request.url)),
                elapsed_ms,
                type(e).__name__,
            )
            return RawExchange(request=request, error=e)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug(
            "%s %s -> %d in %.1fms",
            request.method,
            sanitize_url(str(request.url)),
            response.status_code,
            elapsed_ms,
        )
        return RawExchange(request=request, response=response)

    async def aclose(self) -> None:
        """Close the HTTP client, returning pooled connections."""
        if self._client is None:
            return
        try:
            await self._client.aclose()
            logger.debug("Closed HTTP client")
        finally:
            self._client = None
