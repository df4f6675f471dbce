# File: secreq_api/application/fanout.py
import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def gather_all(
    calls: Sequence[Callable[[], Awaitable[T]]],
    max_concurrency: Optional[int] = None,
) -> List[T]:
    """
    Runs every call concurrently and joins them, all-or-nothing.

    Args:
        calls: Zero-argument callables, each returning an awaitable. A call is
            only started once a concurrency slot is free.
        max_concurrency: Upper bound on calls in flight. None means unbounded.

    Returns:
        Results in the same order as `calls`, independent of completion order.

    Raises:
        The failure of the lowest-index call among those that failed before
        the rest were cancelled. Calls still in flight when the first failure
        completes are cancelled and no partial result is returned.
    """
    if not calls:
        return []
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _run(call: Callable[[], Awaitable[T]]) -> T:
        if semaphore is None:
            return await call()
        async with semaphore:
            return await call()

    tasks = [asyncio.ensure_future(_run(call)) for call in calls]
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        # settle cancelled tasks so no exception goes unretrieved
        await asyncio.gather(*tasks, return_exceptions=True)

    for index, task in enumerate(tasks):
        if task.cancelled():
            continue
        error = task.exception()
        if error is not None:
            log.warning(
                "Fan-out call failed, aborting remaining calls",
                failed_index=index,
                total_calls=len(tasks),
                cancelled=len(pending),
                error=str(error),
            )
            raise error

    return [task.result() for task in tasks]
