"""Helpers for racing awaitables against a shared cancellation signal."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Cancelled(Exception):
    """The shared cancellation event fired before the awaitable finished."""


async def run_cancellable(awaitable: Awaitable[T], cancel_event: asyncio.Event | None) -> T:
    """
    Await ``awaitable`` unless ``cancel_event`` fires first.

    The in-flight operation is cancelled when the event wins the race, so the
    underlying network request is aborted rather than left running.

    Raises:
        Cancelled: if the event was set before or during the await
    """
    if cancel_event is None:
        return await awaitable

    if cancel_event.is_set():
        # Close un-awaited coroutines so they don't warn
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise Cancelled()

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        work.cancel()
        waiter.cancel()
        raise

    if work in done:
        waiter.cancel()
        return work.result()

    work.cancel()
    try:
        await work
    except asyncio.CancelledError:
        pass
    except Exception as e:
        # The work failed while being torn down; the cancellation still wins
        logger.debug(f"Cancelled work raised during teardown: {e!r}")
    raise Cancelled()
