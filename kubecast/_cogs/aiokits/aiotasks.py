"""
Task orchestration for the broadcasts: waiting for a group of tasks, and
cancelling what is left of it.

Only real tasks are accepted, since the leftovers are cancelled.
Mind that a task wrapping a synchronous call in an executor cannot be
interrupted mid-call: it finishes its call first, and only then is cancelled.
"""
import asyncio
from typing import TYPE_CHECKING, Any, Collection, Set, Tuple

from kubecast._cogs.helpers import typedefs

# The generic task type is only subscriptable in the stubs, not at runtime.
if TYPE_CHECKING:
    Task = asyncio.Task[Any]
else:
    Task = asyncio.Task


async def wait(
        tasks: Collection[Task],
        *,
        return_when: Any = asyncio.ALL_COMPLETED,
) -> Tuple[Set[Task], Set[Task]]:
    """
    The same as :func:`asyncio.wait`, but an empty collection is done at once.
    """
    if not tasks:
        return set(), set()
    return await asyncio.wait(tasks, return_when=return_when)


async def cancel(
        tasks: Collection[Task],
        *,
        title: str,
        logger: typedefs.Logger,
) -> None:
    """
    Cancel the tasks and wait until all of them are finished.

    If the caller is cancelled while waiting, the tasks remain cancelled,
    but are not awaited anymore.
    """
    remaining = [task for task in tasks if not task.done()]
    if not remaining:
        return

    for task in remaining:
        task.cancel()

    try:
        await wait(remaining)
    except asyncio.CancelledError:
        unfinished = [task for task in remaining if not task.done()]
        logger.debug(f"{title} is cancelled while cancelling its {len(unfinished)} tasks.")
        raise
    else:
        logger.debug(f"{title} has cancelled {len(remaining)} unfinished tasks.")
