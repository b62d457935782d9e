"""Batch execution: throttled concurrent launch with per-item isolation."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, TypeVar

from gemini_search.options import BatchSettings
from gemini_search.redirect import resolve_redirect
from gemini_search.request import build_request_body
from gemini_search.response import process_response

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from gemini_search.config import Credentials
    from gemini_search.options import RequestOptions, ResponseOptions
    from gemini_search.providers.base import HttpTransport
    from gemini_search.response import ResponseOutput

logger = logging.getLogger(__name__)

P = TypeVar("P")
T = TypeVar("T")

ErrorRecord = dict[str, str]


async def execute_request(
    request_options: RequestOptions,
    response_options: ResponseOptions,
    *,
    transport: HttpTransport,
    credentials: Credentials,
    resolver: Callable[[str], Awaitable[str]] = resolve_redirect,
) -> ResponseOutput:
    """Run one item's pipeline: build body, call the API, process the response."""
    body = build_request_body(request_options)
    response = await transport.generate(request_options.model, body, credentials)
    return await process_response(response, response_options, resolver=resolver)


async def run_batch(
    count: int,
    read_item: Callable[[int], P],
    run_item: Callable[[int, P], Awaitable[T]],
    *,
    batching: BatchSettings | None = None,
    continue_on_fail: bool = False,
) -> list[T | ErrorRecord]:
    """Launch one unit of work per item and collect results in index order.

    Args:
        count: Number of input items.
        read_item: Synchronously reads item *i*'s parameters. A failure here
            is recorded for that item and schedules no work.
        run_item: Coroutine factory for item *i*'s pipeline.
        batching: Burst throttle applied before each launch.
        continue_on_fail: When True, failures become ``{"error": message}``
            records at their index. When False, the lowest-index failure is
            raised and no output is returned.

    Returns:
        One entry per item, in input order.
    """
    settings = batching or BatchSettings()
    start = time.perf_counter()
    tasks: dict[int, asyncio.Task[T]] = {}
    read_errors: dict[int, Exception] = {}

    try:
        for i in range(count):
            delay = settings.delay_before(i)
            if delay > 0:
                logger.debug("Throttling %.3fs before item %d", delay, i)
                await asyncio.sleep(delay)

            try:
                params = read_item(i)
            except Exception as e:
                if not continue_on_fail:
                    raise
                logger.debug("Item %d parameter read failed: %s", i, e)
                read_errors[i] = e
                continue

            tasks[i] = asyncio.create_task(
                _run(run_item, i, params), name=f"gemini_search-item-{i}"
            )
    except BaseException as e:
        await _cancel_all(tasks.values())
        earlier = _lowest_failure(tasks)
        if isinstance(e, Exception) and earlier is not None:
            # Launched items all precede the failing read.
            raise earlier
        raise

    logger.debug(
        "Launched %d of %d item(s) batch_size=%d interval_ms=%g",
        len(tasks),
        count,
        settings.effective_batch_size,
        settings.batch_interval_ms if settings.throttled else 0,
    )

    # Collect *all* outcomes before raising so no task is left with an
    # unobserved exception.
    results = await asyncio.gather(*tasks.values(), return_exceptions=True)
    outcomes = dict(zip(tasks.keys(), results, strict=True))

    output: list[T | ErrorRecord] = []
    for i in range(count):
        if i in read_errors:
            output.append(error_record(read_errors[i]))
            continue

        outcome = outcomes[i]
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, Exception):
            if not continue_on_fail:
                # Deterministic: prefer lowest item index, not "first to fail".
                raise outcome
            output.append(error_record(outcome))
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        output.append(outcome)

    logger.debug(
        "Batch of %d item(s) finished in %.3fs", count, time.perf_counter() - start
    )
    return output


async def _run(run_item: Callable[[int, P], Awaitable[T]], index: int, params: P) -> T:
    try:
        return await run_item(index, params)
    except Exception as e:
        if getattr(e, "item_index", False) is None:
            e.item_index = index  # type: ignore[attr-defined]
        raise


def error_record(exc: BaseException) -> ErrorRecord:
    """Host-facing error record for a failed item."""
    return {"error": str(exc) or type(exc).__name__}


async def _cancel_all(tasks: Iterable[asyncio.Task[T]]) -> None:
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


def _lowest_failure(tasks: dict[int, asyncio.Task[T]]) -> Exception | None:
    """Return the lowest-index failure among finished tasks.

    Retrieves every finished task's exception so none is reported as unobserved.
    """
    lowest: Exception | None = None
    for i in sorted(tasks):
        task = tasks[i]
        if not task.done() or task.cancelled():
            continue
        exc = task.exception()
        if lowest is None and isinstance(exc, Exception):
            lowest = exc
    return lowest
