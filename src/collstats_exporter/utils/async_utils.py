"""
Async utilities for the collStats exporter

pymongo is a blocking driver; sampling cycles are pushed onto a small
thread pool so the event loop that owns the process stays responsive.
"""

import asyncio
import functools
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Global thread pool for blocking driver calls
_thread_pool = None
_thread_pool_lock = threading.Lock()


def get_thread_pool() -> ThreadPoolExecutor:
    """Get or create the global thread pool"""
    global _thread_pool

    if _thread_pool is None:
        with _thread_pool_lock:
            if _thread_pool is None:
                _thread_pool = ThreadPoolExecutor(
                    max_workers=2,
                    thread_name_prefix="collstats_worker",
                )

    return _thread_pool


async def run_in_thread(func: Callable[..., T], *args, **kwargs) -> T:
    """
    Run a synchronous function in the thread pool

    Args:
        func: Function to run
        *args: Function arguments
        **kwargs: Function keyword arguments

    Returns:
        Function result
    """
    loop = asyncio.get_running_loop()
    executor = get_thread_pool()

    try:
        if kwargs:
            partial_func = functools.partial(func, **kwargs)
            return await loop.run_in_executor(executor, partial_func, *args)
        return await loop.run_in_executor(executor, func, *args)

    except Exception as e:
        logger.error(
            "Error running function in thread",
            function=getattr(func, "__name__", repr(func)),
            error=str(e),
        )
        raise


async def run_periodically(
    func: Callable[[], T],
    interval_seconds: float,
    stop_event: asyncio.Event,
) -> None:
    """
    Run a blocking function in the thread pool every interval until stopped

    A run that raises is logged and the loop continues with the next tick.

    Args:
        func: Blocking function to run
        interval_seconds: Delay between the end of one run and the start of the next
        stop_event: Set to stop the loop
    """
    while not stop_event.is_set():
        try:
            await run_in_thread(func)
        except Exception as e:
            logger.error("Periodic run failed", error=str(e))

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            continue


async def shutdown_thread_pool():
    """Shutdown the global thread pool"""
    global _thread_pool

    if _thread_pool is not None:
        _thread_pool.shutdown(wait=True)
        _thread_pool = None
        logger.info("Thread pool shut down")
