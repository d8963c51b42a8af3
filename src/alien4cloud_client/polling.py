"""Polling loops used to follow asynchronous Alien4Cloud operations."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from loguru import logger

from .errors import A4CError
from .models.deployment import Execution

ExecutionCallback = Callable[[Execution | None, BaseException | None], Any]
Sleep = Callable[[float], Awaitable[Any]]


async def _notify(
    callback: ExecutionCallback, execution: Execution | None, error: BaseException | None
) -> None:
    result = callback(execution, error)
    if inspect.isawaitable(result):
        await result


async def monitor_execution(
    fetch: Callable[[], Awaitable[Execution]],
    callback: ExecutionCallback,
    *,
    poll_interval: float,
    settle_delay: float,
    sleep: Sleep = asyncio.sleep,
) -> Execution | None:
    """Poll ``fetch`` until the execution reaches a terminal status.

    The callback fires exactly once: with the terminal execution, with the
    error that stopped polling, or with the ``CancelledError`` when the
    monitoring task is cancelled (the cancellation is then re-raised).
    """
    try:
        await sleep(settle_delay)
        while True:
            execution = await fetch()
            logger.debug(f"Execution {execution.id} status: {execution.status}")
            if execution.is_terminal:
                logger.info(
                    f"Execution {execution.id} of workflow {execution.workflow_name} "
                    f"ended with status {execution.status}"
                )
                await _notify(callback, execution, None)
                return execution
            await sleep(poll_interval)
    except asyncio.CancelledError as exc:
        logger.debug("Execution monitoring cancelled")
        await _notify(callback, None, exc)
        raise
    except (A4CError, httpx.HTTPError) as exc:
        logger.error(f"Execution monitoring failed: {exc}")
        await _notify(callback, None, exc)
        return None


async def poll_until(
    fetch: Callable[[], Awaitable[str]],
    accepted: set[str] | frozenset[str],
    *,
    interval: float,
    sleep: Sleep = asyncio.sleep,
) -> str:
    """Call ``fetch`` every ``interval`` seconds until it returns an accepted value."""
    while True:
        value = await fetch()
        if value in accepted:
            return value
        logger.debug(f"Waiting for one of {sorted(accepted)}, current value: {value}")
        await sleep(interval)
