"""Async/sync bridging without touching the caller's event loop.

API calls run as coroutines on a private event loop hosted by a daemon
thread. Synchronous callers block on the ``concurrent.futures.Future``
returned by :meth:`LoopThread.submit`; asyncio callers can await the
same future through :func:`asyncio.wrap_future`.
"""

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Coroutine, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _copy_outcome(task: asyncio.Task, future: concurrent.futures.Future) -> None:
    if task.cancelled():
        future.cancel()
        return
    # A future cancelled from another thread can no longer be completed.
    if not future.set_running_or_notify_cancel():
        return
    if task.exception() is not None:
        future.set_exception(task.exception())
    else:
        future.set_result(task.result())


def _cancel_task(
    future: concurrent.futures.Future, loop: asyncio.AbstractEventLoop, task: asyncio.Task
) -> None:
    if future.cancelled() and not loop.is_closed():
        loop.call_soon_threadsafe(task.cancel)


class LoopThread:
    """An asyncio event loop running on its own thread.

    The loop is created by :meth:`start` and torn down by :meth:`stop`.
    Coroutines are handed over with :meth:`submit`, which never blocks
    the calling thread.
    """

    def __init__(self, name: str = "clx-xms-loop"):
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._started = threading.Event()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise RuntimeError("LoopThread not started")
        return self._loop

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def in_loop_thread(self) -> bool:
        """Whether the calling thread is the loop's own thread."""
        return self._thread is not None and threading.current_thread() is self._thread

    def start(self) -> None:
        """Create the event loop and start serving it on a daemon thread."""
        if self._thread is not None:
            raise RuntimeError("LoopThread already started")
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        self._started.wait()
        logger.debug("Started event loop thread %s", self._name)

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.call_soon(self._started.set)
        try:
            self._loop.run_forever()
        finally:
            try:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                if pending:
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            finally:
                self._loop.close()
                asyncio.set_event_loop(None)

    def submit(self, coro: Coroutine[Any, Any, T]) -> "concurrent.futures.Future[T]":
        """Schedule a coroutine on the loop.

        Cancelling the returned future before the loop gets to the
        coroutine closes it without running any of it; cancelling it
        later cancels the task.

        :param coro: Coroutine to run
        :return: Future completed with the coroutine's outcome
        """
        loop = self.loop
        future: "concurrent.futures.Future[T]" = concurrent.futures.Future()

        def _start() -> None:
            if future.cancelled():
                coro.close()
                return
            task = loop.create_task(coro)
            task.add_done_callback(lambda t: _copy_outcome(t, future))
            future.add_done_callback(lambda f: _cancel_task(f, loop, task))

        loop.call_soon_threadsafe(_start)
        return future

    def run(self, coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
        """Run a coroutine on the loop and block until it finishes.

        :param coro: Coroutine to run
        :param timeout: Optional timeout in seconds
        :return: The coroutine's result
        """
        if self.in_loop_thread():
            coro.close()
            raise RuntimeError("Cannot block on the event loop from its own thread")
        return self.submit(coro).result(timeout)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the loop and wait for its thread to exit.

        Tasks still pending when the loop stops are cancelled.

        :param timeout: Optional time to wait for the thread
        """
        if self._thread is None or self._loop is None:
            return
        if self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
        if not self.in_loop_thread():
            self._thread.join(timeout)
        logger.debug("Stopped event loop thread %s", self._name)
