"""Completion handles for asynchronous API calls.

Every asynchronous operation returns a :class:`CallContext`. It wraps a
single ``concurrent.futures.Future`` and broadcasts that one completion
to everyone interested in it: threads blocked in :meth:`CallContext.result`,
asyncio code awaiting the context, and the optional callback given when
the call was issued. Because there is only one completion, a failed call
hands the very same exception instance to all of them.

Examples:
    >>> ctx = conn.fetch_batch_async("01ABC", callback=MyCallback())
    >>> batch = ctx.result(timeout=10)
"""

import asyncio
import concurrent.futures
import logging
from typing import Any, Callable, Generator, Generic, Optional, TypeVar, Union

from .exceptions import CallCancelledError, CallTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FutureCallback(Generic[T]):
    """Observer notified once when a call completes.

    Subclass and override the notifications of interest; the defaults do
    nothing. Notifications run on the thread that completed the call,
    which is the connection's event loop thread unless the call had
    already completed when the callback was registered.
    """

    def completed(self, result: T) -> None:
        """Called with the result of a successful call."""

    def failed(self, exception: BaseException) -> None:
        """Called with the exception of a failed call."""

    def cancelled(self) -> None:
        """Called when the call was cancelled before it completed."""


Callback = Union[FutureCallback[Any], Callable[["CallContext[Any]"], None]]
"""A :class:`FutureCallback` or a plain callable taking the call context."""


class CallContext(Generic[T]):
    """Handle on one in-flight API call.

    :param future: Future completed by the call, a fresh one if omitted
    :type future: Optional[concurrent.futures.Future]
    :param callback: Optional observer of the completion
    :type callback: Optional[Callback]
    """

    def __init__(
        self,
        future: Optional[concurrent.futures.Future] = None,
        callback: Optional[Callback] = None,
    ):
        self._future: concurrent.futures.Future = (
            future if future is not None else concurrent.futures.Future()
        )
        if callback is not None:
            self.add_callback(callback)

    @classmethod
    def failed_with(
        cls, exception: BaseException, callback: Optional[Callback] = None
    ) -> "CallContext[Any]":
        """Create a context that has already failed.

        Used for calls rejected before any I/O, so the caller observes the
        failure the same way as any other.

        :param exception: The failure
        :param callback: Optional observer, notified immediately
        :return: Completed context
        """
        context: CallContext[Any] = cls(callback=callback)
        context.set_exception(exception)
        return context

    @property
    def future(self) -> concurrent.futures.Future:
        """The underlying future."""
        return self._future

    def done(self) -> bool:
        return self._future.done()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def cancel(self) -> bool:
        """Cancel the call.

        A call that has not started yet never starts; a running call is
        aborted. Either way the context completes as cancelled.

        :return: False if the call had already completed
        :rtype: bool
        """
        return self._future.cancel()

    def _wait(self, timeout: Optional[float]) -> None:
        done, _ = concurrent.futures.wait([self._future], timeout=timeout)
        if not done:
            raise CallTimeoutError(timeout)
        if self._future.cancelled():
            raise CallCancelledError()

    def result(self, timeout: Optional[float] = None) -> T:
        """Block until the call completes and return its result.

        :param timeout: Seconds to wait, forever if None
        :type timeout: Optional[float]
        :return: The call's result
        :raises CallTimeoutError: If the call did not complete in time
        :raises CallCancelledError: If the call was cancelled
        :raises XmsError: The call's own failure, as passed to the callback
        """
        self._wait(timeout)
        return self._future.result()

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """Block until the call completes and return its failure, if any.

        :param timeout: Seconds to wait, forever if None
        :type timeout: Optional[float]
        :return: The failure, or None if the call succeeded
        """
        self._wait(timeout)
        return self._future.exception()

    def set_result(self, result: T) -> None:
        """Complete the call successfully.

        :raises concurrent.futures.InvalidStateError: If already completed or cancelled
        """
        self._future.set_result(result)

    def set_exception(self, exception: BaseException) -> None:
        """Complete the call with a failure.

        :raises concurrent.futures.InvalidStateError: If already completed or cancelled
        """
        self._future.set_exception(exception)

    def add_callback(self, callback: Callback) -> None:
        """Register an observer of the completion.

        If the call has already completed the observer is notified
        immediately on the calling thread.

        :param callback: :class:`FutureCallback` or callable taking this context
        """
        self._future.add_done_callback(lambda _: self._notify(callback))

    def _notify(self, callback: Callback) -> None:
        try:
            if not isinstance(callback, FutureCallback):
                callback(self)
            elif self._future.cancelled():
                callback.cancelled()
            elif self._future.exception() is not None:
                callback.failed(self._future.exception())
            else:
                callback.completed(self._future.result())
        except Exception:
            logger.exception("Completion callback %r raised", callback)

    def __await__(self) -> Generator[Any, None, T]:
        return asyncio.wrap_future(self._future).__await__()

    def __repr__(self) -> str:
        if self._future.cancelled():
            state = "cancelled"
        elif self._future.done():
            state = "failed" if self._future.exception() is not None else "completed"
        else:
            state = "pending"
        return f"<CallContext {state}>"
