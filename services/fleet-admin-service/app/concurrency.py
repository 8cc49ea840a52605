"""
Parallel fetch helper.

Screens that need several independent backend calls fire them together and
give each call that is allowed to fail its own fallback value.
"""

import asyncio
from typing import Any, Awaitable, List, Tuple, Union

from .logging_config import get_logger

logger = get_logger(__name__)

_NO_FALLBACK = object()

Call = Union[Awaitable[Any], Tuple[Awaitable[Any], Any]]


async def _run(index: int, awaitable: Awaitable[Any], fallback: Any) -> Any:
    if fallback is _NO_FALLBACK:
        return await awaitable
    try:
        return await awaitable
    except Exception as error:
        logger.warning(
            "Parallel call failed, using fallback",
            extra={
                "extra_fields": {
                    "call_index": index,
                    "error_type": type(error).__name__,
                    "error_message": str(error),
                }
            },
        )
        return fallback


def with_fallback(awaitable: Awaitable[Any], fallback: Any = None) -> Tuple[Awaitable[Any], Any]:
    """Pair an awaitable with the value to use if it fails."""
    return (awaitable, fallback)


async def gather_with_fallback(*calls: Call) -> List[Any]:
    """
    Run independent calls concurrently.

    Each argument is either an awaitable or an ``(awaitable, fallback)`` pair
    (see ``with_fallback``). A call with a fallback that raises yields its
    fallback instead; a call without one propagates the error, failing the
    whole gather. Calls still running at that point are cancelled.

    Returns:
        Results in argument order
    """
    tasks = []
    for index, call in enumerate(calls):
        if isinstance(call, tuple):
            awaitable, fallback = call
        else:
            awaitable, fallback = call, _NO_FALLBACK
        tasks.append(asyncio.ensure_future(_run(index, awaitable, fallback)))

    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        raise
