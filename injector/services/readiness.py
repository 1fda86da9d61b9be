"""
Waiting for the render target to show its file sections.

Polls on a fixed interval and listens for structural-change notifications at
the same time; whichever sees the target ready first ends the wait. The
subscription and the poller are always disposed when the wait ends, including
on timeout and cancellation.
"""

import asyncio

from injector.core.logging_config import get_logger
from injector.render.target import RenderTarget

logger = get_logger(__name__)


async def wait_until_ready(
    target: RenderTarget, timeout: float, poll_interval: float = 0.5
) -> bool:
    """
    Wait until ``target.is_ready()`` or the timeout elapses.

    Args:
        target: Render target to watch
        timeout: Upper bound in seconds
        poll_interval: Seconds between polls

    Returns:
        bool: True if the target became ready, False on timeout or if it was
        detached while waiting
    """
    if target.is_ready():
        logger.debug("Render target already ready")
        return True

    ready = asyncio.Event()

    def check() -> None:
        if not target.is_attached() or target.is_ready():
            ready.set()

    async def poll() -> None:
        while not ready.is_set():
            await asyncio.sleep(poll_interval)
            check()

    unsubscribe = target.subscribe(check)
    poller = asyncio.create_task(poll())
    try:
        await asyncio.wait_for(ready.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Timed out after {timeout}s waiting for the rendered diff view")
        return False
    finally:
        unsubscribe()
        poller.cancel()
        try:
            await poller
        except asyncio.CancelledError:
            pass

    if not target.is_attached():
        logger.warning("Render target was detached while waiting for it")
        return False
    return True
