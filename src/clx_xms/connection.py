"""Connection to the XMS REST API.

:class:`ApiConnection` offers one method per API action. Each action is
available in two forms:

- ``action(...)`` blocks until the call completes and returns its result
  or raises its failure
- ``action_async(..., callback=None)`` returns a :class:`CallContext`
  immediately; the optional callback observes the same completion

Both forms run the same coroutine on the connection's private event
loop thread, so a failure is always the same exception instance whether
it is raised by ``result()``, passed to ``callback.failed`` or raised by
``await``.

Examples:
    >>> with ApiConnection("my-plan", "my-token") as conn:
    ...     batch = conn.create_batch(
    ...         MtBatchTextSmsCreate(sender="12345", to=["987654321"], body="Hi")
    ...     )
    ...     for result in conn.fetch_batches():
    ...         print(result.id)
"""

import asyncio
import logging
import threading
from typing import Any, Collection, List, Optional, Sequence, Set, Tuple
from urllib.parse import quote

import httpx

from .call_context import Callback, CallContext
from .config.settings import DEFAULT_ENDPOINT, Settings
from .exceptions import ConfigurationError, ConnectionClosedError, InvalidArgumentError
from .models.base_models import BaseApiModel, Endpoint, Tags, TagsUpdate
from .models.batches import (
    MtBatchBinarySmsCreate,
    MtBatchBinarySmsUpdate,
    MtBatchSmsCreateVariant,
    MtBatchSmsResult,
    MtBatchSmsUpdateVariant,
    MtBatchTextSmsCreate,
    MtBatchTextSmsUpdate,
    PagedBatchResult,
)
from .models.delivery_reports import BatchDeliveryReport
from .models.filters import BatchDeliveryReportParams, BatchFilter, GroupFilter
from .models.groups import GroupCreate, GroupResult, GroupUpdate, PagedGroupResult
from .paging import PagedFetcher
from .utils.async_compat import LoopThread
from .utils.codec import Codec, default_codec
from .utils.http import Transport, build_request, classify
from .utils.security import sanitize_url, setup_secure_logging

logger = logging.getLogger(__name__)

_NEW = "new"
_STARTED = "started"
_CLOSED = "closed"


def _segment(value: str, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be a non-empty string", name, value)
    return quote(value, safe="")


class ApiConnection:
    """Connection to the XMS REST API for one service plan.

    The connection is inert until :meth:`start` is called (or the
    connection is entered as a context manager) and must be closed with
    :meth:`close` to release its connection pool and event loop thread.
    It is safe to use from many threads at once; concurrent calls share
    only the transport's connection pool.

    :param service_plan_id: Service plan (account) identifier
    :type service_plan_id: str
    :param token: Bearer token
    :type token: str
    :param endpoint: Base URL of the API
    :type endpoint: str
    :param timeout: Optional transport timeout configuration
    :type timeout: Optional[httpx.Timeout]
    :param limits: Optional connection pool limits
    :type limits: Optional[httpx.Limits]
    :param transport: Optional httpx transport, e.g. ``httpx.MockTransport``
    :type transport: Optional[httpx.AsyncBaseTransport]
    :param codec: Optional codec for request and response bodies
    :type codec: Optional[Codec]
    """

    def __init__(
        self,
        service_plan_id: str,
        token: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: Optional[httpx.Timeout] = None,
        limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        codec: Optional[Codec] = None,
    ):
        for name, value in (
            ("service_plan_id", service_plan_id),
            ("token", token),
            ("endpoint", endpoint),
        ):
            if not isinstance(value, str) or not value.strip():
                raise InvalidArgumentError(f"{name} must be a non-empty string", name)
        self._endpoint = Endpoint(
            base_url=endpoint.rstrip("/"), service_plan_id=service_plan_id, token=token
        )
        self._transport = Transport(timeout=timeout, limits=limits, transport=transport)
        self._codec = codec or default_codec
        self._loop_thread = LoopThread(name=f"clx-xms-{service_plan_id}")
        self._lock = threading.Lock()
        self._state = _NEW
        self._inflight: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        configure_logging: bool = False,
        **kwargs: Any,
    ) -> "ApiConnection":
        """Create a connection from configuration.

        :param settings: Settings to use, loaded from the environment if None
        :type settings: Optional[Settings]
        :param configure_logging: Also set up sanitized logging at
            ``settings.log_level``; leave False when the application
            configures logging itself
        :type configure_logging: bool
        :param kwargs: Extra constructor arguments (e.g. ``transport``)
        :return: A connection that still needs to be started
        :rtype: ApiConnection
        :raises ConfigurationError: If service plan id or token is missing
        """
        settings = settings or Settings()
        endpoint = settings.endpoint_config()
        if endpoint is None:
            missing = "XMS_SERVICE_PLAN_ID" if not settings.service_plan_id else "XMS_TOKEN"
            raise ConfigurationError(f"{missing} is not configured", setting=missing)
        if configure_logging:
            setup_secure_logging(settings.log_level)
        kwargs.setdefault("timeout", settings.timeout)
        kwargs.setdefault("limits", settings.limits)
        return cls(
            service_plan_id=endpoint.service_plan_id,
            token=endpoint.token,
            endpoint=endpoint.base_url,
            **kwargs,
        )

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def is_running(self) -> bool:
        return self._state == _STARTED

    # Lifecycle

    def start(self) -> "ApiConnection":
        """Start the event loop thread and open the HTTP transport.

        :return: This connection
        :rtype: ApiConnection
        :raises ConnectionClosedError: If the connection was already closed
        """
        with self._lock:
            if self._state == _STARTED:
                return self
            if self._state == _CLOSED:
                raise ConnectionClosedError("A closed connection cannot be restarted")
            self._loop_thread.start()
            self._loop_thread.run(self._transport.open())
            self._state = _STARTED
        logger.info(
            "Started API connection to %s for %s",
            sanitize_url(self._endpoint.base_url),
            self._endpoint.service_plan_id,
        )
        return self

    def close(self) -> None:
        """Close the connection.

        New calls fail with :class:`ConnectionClosedError` from this point
        on. Calls already issued run to completion before the connection
        pool is closed and the event loop thread exits. Closing twice has
        no effect.
        """
        if self._loop_thread.in_loop_thread():
            raise RuntimeError("close() cannot be called from a completion callback")
        with self._lock:
            if self._state == _CLOSED:
                return
            was_started = self._state == _STARTED
            self._state = _CLOSED
        if not was_started:
            return
        logger.info("Closing API connection for %s", self._endpoint.service_plan_id)
        try:
            self._loop_thread.run(self._shutdown())
        finally:
            self._loop_thread.stop()
        logger.info("API connection for %s closed", self._endpoint.service_plan_id)

    async def _shutdown(self) -> None:
        pending = [task for task in self._inflight if not task.done()]
        if pending:
            logger.debug("Waiting for %d in-flight call(s)", len(pending))
            await asyncio.wait(pending)
        await self._transport.aclose()

    def __enter__(self) -> "ApiConnection":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<ApiConnection {self._endpoint.base_url} "
            f"plan={self._endpoint.service_plan_id} state={self._state}>"
        )

    # Call machinery

    def call_async(
        self,
        method: str,
        path: Sequence[str],
        expected_status: Collection[int],
        result_type: Any,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        body: Optional[BaseApiModel] = None,
        callback: Optional[Callback] = None,
    ) -> CallContext[Any]:
        """Issue one API call below the service plan.

        This is the template every action follows: build the request,
        send it on the event loop thread, classify the exchange and
        decode the result.

        :param method: HTTP method
        :param path: Quoted path segments below ``/{service_plan_id}``
        :param expected_status: Status codes meaning success
        :param result_type: Type of the success body, None for no body
        :param params: Optional ordered query parameters
        :param body: Optional request model
        :param callback: Optional completion observer
        :return: Handle on the call
        :rtype: CallContext
        """
        content = self._codec.encode(body) if body is not None else None
        request = build_request(
            method,
            self._endpoint.url(*path),
            self._endpoint.token,
            params=params,
            body=content,
        )
        with self._lock:
            if self._state != _STARTED:
                logger.debug("Rejected %s %s: connection not running", method, request.url.path)
                return CallContext.failed_with(ConnectionClosedError(), callback)
            future = self._loop_thread.submit(
                self._run_call(request, expected_status, result_type)
            )
        return CallContext(future, callback)

    async def _run_call(
        self, request: httpx.Request, expected_status: Collection[int], result_type: Any
    ) -> Any:
        task = asyncio.current_task()
        self._inflight.add(task)
        try:
            exchange = await self._transport.execute(request)
            return classify(exchange, expected_status, result_type, self._codec)
        finally:
            self._inflight.discard(task)

    def _wait(self, context: CallContext[Any]) -> Any:
        if self._loop_thread.in_loop_thread():
            context.cancel()
            raise RuntimeError(
                "Blocking calls cannot be made from a completion callback; "
                "use the *_async form instead"
            )
        return context.result()

    # Batches

    def create_batch_async(
        self, create: MtBatchSmsCreateVariant, callback: Optional[Callback] = None
    ) -> CallContext[MtBatchSmsResult]:
        """Create and send a batch.

        :param create: Text or binary batch create request
        :type create: MtBatchTextSmsCreate | MtBatchBinarySmsCreate
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the created batch
        """
        if not isinstance(create, (MtBatchTextSmsCreate, MtBatchBinarySmsCreate)):
            raise InvalidArgumentError("create must be a batch create request", "create")
        return self.call_async(
            "POST", ("batches",), (201,), MtBatchSmsResult, body=create, callback=callback
        )

    def create_batch(self, create: MtBatchSmsCreateVariant) -> MtBatchSmsResult:
        """Create and send a batch, blocking until it is created."""
        return self._wait(self.create_batch_async(create))

    def replace_batch_async(
        self,
        batch_id: str,
        create: MtBatchSmsCreateVariant,
        callback: Optional[Callback] = None,
    ) -> CallContext[MtBatchSmsResult]:
        """Replace a scheduled batch with a new definition.

        :param batch_id: Batch to replace
        :param create: The new batch definition
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the replaced batch
        """
        if not isinstance(create, (MtBatchTextSmsCreate, MtBatchBinarySmsCreate)):
            raise InvalidArgumentError("create must be a batch create request", "create")
        return self.call_async(
            "PUT",
            ("batches", _segment(batch_id, "batch_id")),
            (200,),
            MtBatchSmsResult,
            body=create,
            callback=callback,
        )

    def replace_batch(
        self, batch_id: str, create: MtBatchSmsCreateVariant
    ) -> MtBatchSmsResult:
        return self._wait(self.replace_batch_async(batch_id, create))

    def update_batch_async(
        self,
        batch_id: str,
        update: MtBatchSmsUpdateVariant,
        callback: Optional[Callback] = None,
    ) -> CallContext[MtBatchSmsResult]:
        """Partially update a batch.

        :param batch_id: Batch to update
        :param update: Text or binary batch update
        :type update: MtBatchTextSmsUpdate | MtBatchBinarySmsUpdate
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the updated batch
        """
        if not isinstance(update, (MtBatchTextSmsUpdate, MtBatchBinarySmsUpdate)):
            raise InvalidArgumentError("update must be a batch update request", "update")
        return self.call_async(
            "POST",
            ("batches", _segment(batch_id, "batch_id")),
            (200, 201),
            MtBatchSmsResult,
            body=update,
            callback=callback,
        )

    def update_batch(
        self, batch_id: str, update: MtBatchSmsUpdateVariant
    ) -> MtBatchSmsResult:
        return self._wait(self.update_batch_async(batch_id, update))

    def fetch_batch_async(
        self, batch_id: str, callback: Optional[Callback] = None
    ) -> CallContext[MtBatchSmsResult]:
        """Fetch a batch by id.

        :param batch_id: Batch to fetch
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the text or binary batch
        """
        return self.call_async(
            "GET",
            ("batches", _segment(batch_id, "batch_id")),
            (200,),
            MtBatchSmsResult,
            callback=callback,
        )

    def fetch_batch(self, batch_id: str) -> MtBatchSmsResult:
        return self._wait(self.fetch_batch_async(batch_id))

    def cancel_batch_async(
        self, batch_id: str, callback: Optional[Callback] = None
    ) -> CallContext[MtBatchSmsResult]:
        """Cancel a batch that has not been fully sent yet.

        :param batch_id: Batch to cancel
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the canceled batch
        """
        return self.call_async(
            "DELETE",
            ("batches", _segment(batch_id, "batch_id")),
            (200,),
            MtBatchSmsResult,
            callback=callback,
        )

    def cancel_batch(self, batch_id: str) -> MtBatchSmsResult:
        return self._wait(self.cancel_batch_async(batch_id))

    def fetch_batches(
        self, filter: Optional[BatchFilter] = None
    ) -> PagedFetcher[MtBatchSmsResult]:
        """Listing of batches matching a filter.

        Nothing is fetched until a page or element is requested from the
        returned fetcher.

        :param filter: Optional batch filter
        :type filter: Optional[BatchFilter]
        :return: Fetcher over the batch pages
        :rtype: PagedFetcher
        """
        return PagedFetcher(self, ("batches",), PagedBatchResult, filter or BatchFilter())

    def fetch_delivery_report_async(
        self,
        batch_id: str,
        params: Optional[BatchDeliveryReportParams] = None,
        callback: Optional[Callback] = None,
    ) -> CallContext[BatchDeliveryReport]:
        """Fetch the delivery report of a batch.

        :param batch_id: Batch whose report to fetch
        :param params: Optional report type and status/code filters
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the report
        """
        params = params or BatchDeliveryReportParams()
        return self.call_async(
            "GET",
            ("batches", _segment(batch_id, "batch_id"), "delivery_report"),
            (200,),
            BatchDeliveryReport,
            params=params.to_query_params(),
            callback=callback,
        )

    def fetch_delivery_report(
        self, batch_id: str, params: Optional[BatchDeliveryReportParams] = None
    ) -> BatchDeliveryReport:
        return self._wait(self.fetch_delivery_report_async(batch_id, params))

    def fetch_batch_tags_async(
        self, batch_id: str, callback: Optional[Callback] = None
    ) -> CallContext[Tags]:
        return self.call_async(
            "GET",
            ("batches", _segment(batch_id, "batch_id"), "tags"),
            (200,),
            Tags,
            callback=callback,
        )

    def fetch_batch_tags(self, batch_id: str) -> Tags:
        return self._wait(self.fetch_batch_tags_async(batch_id))

    def replace_batch_tags_async(
        self, batch_id: str, tags: Tags, callback: Optional[Callback] = None
    ) -> CallContext[Tags]:
        """Replace all tags of a batch."""
        return self.call_async(
            "PUT",
            ("batches", _segment(batch_id, "batch_id"), "tags"),
            (200,),
            Tags,
            body=tags,
            callback=callback,
        )

    def replace_batch_tags(self, batch_id: str, tags: Tags) -> Tags:
        return self._wait(self.replace_batch_tags_async(batch_id, tags))

    def update_batch_tags_async(
        self, batch_id: str, update: TagsUpdate, callback: Optional[Callback] = None
    ) -> CallContext[Tags]:
        """Add and remove tags of a batch."""
        return self.call_async(
            "POST",
            ("batches", _segment(batch_id, "batch_id"), "tags"),
            (200,),
            Tags,
            body=update,
            callback=callback,
        )

    def update_batch_tags(self, batch_id: str, update: TagsUpdate) -> Tags:
        return self._wait(self.update_batch_tags_async(batch_id, update))

    # Groups

    def create_group_async(
        self, create: GroupCreate, callback: Optional[Callback] = None
    ) -> CallContext[GroupResult]:
        """Create a group.

        :param create: Group definition
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the created group
        """
        return self.call_async(
            "POST", ("groups",), (201,), GroupResult, body=create, callback=callback
        )

    def create_group(self, create: GroupCreate) -> GroupResult:
        return self._wait(self.create_group_async(create))

    def fetch_group_async(
        self, group_id: str, callback: Optional[Callback] = None
    ) -> CallContext[GroupResult]:
        return self.call_async(
            "GET",
            ("groups", _segment(group_id, "group_id")),
            (200,),
            GroupResult,
            callback=callback,
        )

    def fetch_group(self, group_id: str) -> GroupResult:
        return self._wait(self.fetch_group_async(group_id))

    def update_group_async(
        self, group_id: str, update: GroupUpdate, callback: Optional[Callback] = None
    ) -> CallContext[GroupResult]:
        """Partially update a group.

        :param group_id: Group to update
        :param update: Members, child groups and settings to change
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the updated group
        """
        return self.call_async(
            "POST",
            ("groups", _segment(group_id, "group_id")),
            (200,),
            GroupResult,
            body=update,
            callback=callback,
        )

    def update_group(self, group_id: str, update: GroupUpdate) -> GroupResult:
        return self._wait(self.update_group_async(group_id, update))

    def replace_group_async(
        self, group_id: str, create: GroupCreate, callback: Optional[Callback] = None
    ) -> CallContext[GroupResult]:
        """Replace a group's definition entirely."""
        return self.call_async(
            "PUT",
            ("groups", _segment(group_id, "group_id")),
            (200,),
            GroupResult,
            body=create,
            callback=callback,
        )

    def replace_group(self, group_id: str, create: GroupCreate) -> GroupResult:
        return self._wait(self.replace_group_async(group_id, create))

    def delete_group_async(
        self, group_id: str, callback: Optional[Callback] = None
    ) -> CallContext[None]:
        """Delete a group. The call completes with None."""
        return self.call_async(
            "DELETE",
            ("groups", _segment(group_id, "group_id")),
            (204,),
            None,
            callback=callback,
        )

    def delete_group(self, group_id: str) -> None:
        self._wait(self.delete_group_async(group_id))

    def fetch_groups(self, filter: Optional[GroupFilter] = None) -> PagedFetcher[GroupResult]:
        """Listing of groups matching a filter.

        :param filter: Optional group filter
        :type filter: Optional[GroupFilter]
        :return: Fetcher over the group pages
        :rtype: PagedFetcher
        """
        return PagedFetcher(self, ("groups",), PagedGroupResult, filter or GroupFilter())

    def fetch_group_members_async(
        self, group_id: str, callback: Optional[Callback] = None
    ) -> CallContext[List[str]]:
        return self.call_async(
            "GET",
            ("groups", _segment(group_id, "group_id"), "members"),
            (200,),
            List[str],
            callback=callback,
        )

    def fetch_group_members(self, group_id: str) -> List[str]:
        return self._wait(self.fetch_group_members_async(group_id))

    def fetch_group_tags_async(
        self, group_id: str, callback: Optional[Callback] = None
    ) -> CallContext[Tags]:
        return self.call_async(
            "GET",
            ("groups", _segment(group_id, "group_id"), "tags"),
            (200,),
            Tags,
            callback=callback,
        )

    def fetch_group_tags(self, group_id: str) -> Tags:
        return self._wait(self.fetch_group_tags_async(group_id))

    def replace_group_tags_async(
        self, group_id: str, tags: Tags, callback: Optional[Callback] = None
    ) -> CallContext[Tags]:
        return self.call_async(
            "PUT",
            ("groups", _segment(group_id, "group_id"), "tags"),
            (200,),
            Tags,
            body=tags,
            callback=callback,
        )

    def replace_group_tags(self, group_id: str, tags: Tags) -> Tags:
        return self._wait(self.replace_group_tags_async(group_id, tags))

    def update_group_tags_async(
        self, group_id: str, update: TagsUpdate, callback: Optional[Callback] = None
    ) -> CallContext[Tags]:
        return self.call_async(
            "POST",
            ("groups", _segment(group_id, "group_id"), "tags"),
            (200,),
            Tags,
            body=update,
            callback=callback,
        )

    def update_group_tags(self, group_id: str, update: TagsUpdate) -> Tags:
        return self._wait(self.update_group_tags_async(group_id, update))
