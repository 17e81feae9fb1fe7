import asyncio

import pytest

from kubecast._cogs.clients.errors import APIError, APINotFoundError, NotFoundError
from kubecast._core.actions.execution import execute


def returning(value, delay=0):
    async def strategy():
        await asyncio.sleep(delay)
        return value
    return strategy


def raising(exc, delay=0):
    async def strategy():
        await asyncio.sleep(delay)
        raise exc
    return strategy


async def test_empty_broadcast():
    results = await execute([])
    assert results == []


async def test_all_results_are_collected_in_order():
    results = await execute([returning('a', 0.03), returning('b', 0.01), returning('c', 0.02)])
    assert results == ['a', 'b', 'c']


async def test_not_found_results_are_filtered_out():
    results = await execute([
        returning('a'),
        raising(APINotFoundError(None, status=404)),
        returning('c'),
    ])
    assert results == ['a', 'c']


async def test_generic_not_found_is_also_filtered_out():
    results = await execute([raising(NotFoundError()), returning('b')])
    assert results == ['b']


async def test_nothing_found_anywhere():
    results = await execute([raising(NotFoundError()), raising(NotFoundError())])
    assert results == []


async def test_other_errors_escalate():
    error = APIError(None, status=500)
    with pytest.raises(APIError) as err:
        await execute([returning('a'), raising(error), returning('c')])
    assert err.value is error


async def test_remaining_strategies_are_cancelled_on_failure():
    cancelled = asyncio.Event()

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    with pytest.raises(ValueError):
        await execute([slow, raising(ValueError("boo!"), 0.01)])
    assert cancelled.is_set()


async def test_broadcasts_run_concurrently():
    loop = asyncio.get_running_loop()
    started = loop.time()
    results = await execute([returning(i, 0.1) for i in range(10)])
    assert results == list(range(10))
    assert loop.time() - started < 0.5
