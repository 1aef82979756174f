"""Fire-and-forget scheduling of coroutines from sync or async code."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import anyio
from anyio import from_thread

logger = logging.getLogger(__name__)

_background_tasks: set[asyncio.Task] = set()


def _spawn(func: Callable[..., Awaitable[Any]], args: tuple[Any, ...]) -> None:
    task = asyncio.get_running_loop().create_task(func(*args))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


def schedule(func: Callable[..., Awaitable[Any]], *args: Any) -> None:
    """Schedule ``func(*args)`` without waiting for it to finish.

    Inside an event loop the coroutine becomes a task; from an AnyIO worker
    thread (sync FastAPI endpoints) it is handed to the loop that owns the
    thread. Without any event loop, e.g. in scripts, it runs to completion.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        _spawn(func, args)
        return

    try:
        from_thread.run_sync(_spawn, func, args)
    except RuntimeError:
        logger.debug("No event loop available; running %s synchronously", func)
        anyio.run(func, *args)


__all__ = ["schedule"]
