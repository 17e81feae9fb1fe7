"""
Broadcast execution of the API calls to multiple API clients at once.

A single kind can be served by several API clients simultaneously
(e.g. by several versions of the same API group). Every operation on a kind
is therefore dispatched to all of them concurrently, and the results are
aggregated: the clients that do not have the resource ("not found")
contribute nothing, any other failure aborts the whole broadcast.

The calls themselves go through `call`, which translates the client library's
errors into our own (`errors.APIError` and descendants), with the original
error chained as the cause.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from kubecast._cogs.aiokits import aiotasks
from kubecast._cogs.clients import errors
from kubecast._cogs.configs import configuration
from kubecast._core.actions import invocation

logger = logging.getLogger(__name__)

# A zero-argument deferred call with all the operation's arguments already bound.
Strategy = Callable[[], Awaitable[Any]]


class _NotFound:
    """ A marker of a strategy that has found nothing. """


_NOT_FOUND = _NotFound()


async def call(
        fn: invocation.Invokable,
        *args: Any,
        settings: Optional[configuration.ClientSettings] = None,
        **kwargs: Any,
) -> Any:
    """
    Call an API client's function, and translate its errors into our own.
    """
    try:
        return await invocation.invoke(fn, *args, settings=settings, **kwargs)
    except Exception as e:
        error = errors.translate(e)
        if error is None or error is e:
            raise
        raise error from e


async def execute(strategies: Iterable[Strategy]) -> List[Any]:
    """
    Run all the strategies concurrently, and collect their results in order.

    The "not found" results are filtered out. Any other failure cancels
    the remaining strategies (as much as they can be cancelled) and escalates.
    """
    tasks: List[aiotasks.Task] = [asyncio.create_task(_guard(strategy)) for strategy in strategies]
    try:
        _, pending = await aiotasks.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await aiotasks.cancel(tasks, title="The broadcast", logger=logger)
        raise

    if pending:
        await aiotasks.cancel(pending, title="The broadcast", logger=logger)

    # All exceptions are retrieved; only the first one in the strategies order is raised.
    failures = [task.exception() for task in tasks if not task.cancelled()]
    for failure in failures:
        if failure is not None:
            raise failure

    results = [task.result() for task in tasks]
    return [result for result in results if result is not _NOT_FOUND]


async def _guard(strategy: Strategy) -> Any:
    try:
        return await strategy()
    except errors.NotFoundError as e:
        logger.debug(f"Filtered out a not-found result: {e!r}")
        return _NOT_FOUND
