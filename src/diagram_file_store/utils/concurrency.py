"""Fan-out/fan-in over anyio task groups."""

from collections.abc import Awaitable, Callable, Sequence
import logging
from typing import TypeVar, cast

import anyio


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _first_leaf(group: BaseExceptionGroup) -> BaseException:
    first = group.exceptions[0]
    while isinstance(first, BaseExceptionGroup):
        first = first.exceptions[0]
    return first


async def gather_all(
    calls: Sequence[Callable[[], Awaitable[T]]],
    *,
    cancel_on_error: bool = True,
) -> list[T]:
    """Run every call concurrently and return the results in call order.

    Args:
        calls: Zero-argument coroutine factories
        cancel_on_error: When True the first failure cancels the calls still
            running. When False every call runs to completion before the
            first failure is raised.

    Returns:
        Results in the same order as ``calls``

    Raises:
        The first failure itself, unwrapped from anyio's exception group.
    """
    results: list[T | None] = [None] * len(calls)
    errors: list[Exception] = []

    async def _run(index: int, call: Callable[[], Awaitable[T]]) -> None:
        if cancel_on_error:
            results[index] = await call()
            return
        try:
            results[index] = await call()
        except Exception as exc:
            errors.append(exc)

    try:
        async with anyio.create_task_group() as tg:
            for index, call in enumerate(calls):
                tg.start_soon(_run, index, call)
    except ExceptionGroup as group:
        raise _first_leaf(group)  # noqa: B904

    if errors:
        if len(errors) > 1:
            logger.debug("%d of %d concurrent calls failed", len(errors), len(calls))
        raise errors[0]

    return cast(list[T], results)
