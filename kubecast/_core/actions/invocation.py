"""
Invoking the API clients' functions, both sync & async.

The official client library is synchronous and blocking. Its calls are made
in the configured executor (threads), so that a broadcast to several API
clients runs its calls in parallel while the event loop stays responsive.
The async functions (of async clients, or of the test doubles) are awaited
directly, including when they are wrapped into partials or decorators.
"""
import asyncio
import contextvars
import functools
import inspect
from typing import Any, Callable, Coroutine, Optional, TypeVar, Union

from kubecast._cogs.configs import configuration

_R = TypeVar('_R')

# A function which either returns the result, or returns a coroutine with the result.
SyncOrAsync = Union[_R, Coroutine[None, None, _R]]
Invokable = Callable[..., SyncOrAsync[Any]]


async def invoke(
        fn: Invokable,
        *args: Any,
        settings: Optional[configuration.ClientSettings] = None,
        **kwargs: Any,
) -> Any:
    """
    Call a function with the arguments, in the executor if it is synchronous.
    """
    if is_async_fn(fn):
        return await fn(*args, **kwargs)

    # The context variables of the caller are visible in the executor's thread too.
    context = contextvars.copy_context()
    bound_fn = functools.partial(context.run, functools.partial(fn, *args, **kwargs))

    loop = asyncio.get_running_loop()
    executor = settings.execution.executor if settings is not None else None
    future = loop.run_in_executor(executor, bound_fn)

    # A thread cannot be interrupted: on cancellation, wait for the call to finish anyway,
    # and only then re-raise the cancellation, so that the pool is never overbooked.
    cancellation: Optional[asyncio.CancelledError] = None
    while not future.done():
        try:
            await asyncio.shield(future)
        except asyncio.CancelledError as e:
            cancellation = e
    if cancellation is not None:
        raise cancellation

    # Some callable objects are async, but do not look so (e.g. mocks of coroutine functions).
    result = future.result()
    if inspect.isawaitable(result):
        result = await result
    return result


def is_async_fn(fn: Optional[Invokable]) -> bool:
    if fn is None:
        return False
    elif isinstance(fn, functools.partial):
        return is_async_fn(fn.func)
    elif hasattr(fn, '__wrapped__'):  # @functools.wraps()
        return is_async_fn(fn.__wrapped__)
    else:
        return inspect.iscoroutinefunction(fn)
