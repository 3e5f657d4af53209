"""
Shared helpers for marksearch.
"""
import asyncio
import logging
import re
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces and strip the ends."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    timeout: Optional[float] = None,
    retries: int = 0,
    retry_on: Tuple[Type[BaseException], ...] = (asyncio.TimeoutError,),
    backoff: float = 0.5,
    description: str = "call",
) -> T:
    """Await ``func()`` under a deadline, retrying transient failures.

    Args:
        func: Zero-argument coroutine factory; called once per attempt
        timeout: Deadline in seconds for each attempt (None for no deadline)
        retries: Number of additional attempts after the first
        retry_on: Exception types considered transient
        backoff: Initial delay between attempts, doubled after each retry
        description: Label used in log messages

    Returns:
        The value produced by the first successful attempt

    Raises:
        The last exception if every attempt fails, or any non-transient
        exception immediately.
    """
    if retries < 0:
        raise ValueError("retries must be >= 0")

    delay = backoff
    attempt = 0
    while True:
        try:
            if timeout is None:
                return await func()
            return await asyncio.wait_for(func(), timeout=timeout)
        except retry_on as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                f"{description} failed ({type(e).__name__}: {e}); "
                f"retry {attempt}/{retries} in {delay:.2f}s"
            )
            if delay > 0:
                await asyncio.sleep(delay)
            delay *= 2
