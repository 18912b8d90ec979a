"""
Resilience utilities.

- retry_with_backoff: exponential backoff for idempotent calls that fail
  with a TransientError
- run_detached: error boundary for work scheduled after a response is sent
- log_partial_failure: outcome logging for batch operations
"""

import asyncio
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, ParamSpec, TypeVar

logger = logging.getLogger(__name__)

P = ParamSpec('P')
T = TypeVar('T')


class TransientError(Exception):
    """Base class for failures worth retrying (timeouts, throttling, 5xx)."""
    pass


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: tuple = (TransientError,)
):
    """
    Retry an async function with exponential backoff.

    Only idempotent calls should be decorated: record store reads and
    counts, and edits of an already-sent chat message. Channel message
    sends and function invocations are never retried here.

    Args:
        max_retries: Total number of attempts
        base_delay: Delay before the second attempt, in seconds
        max_delay: Upper bound for any single delay
        exponential_base: Growth factor between delays
        exceptions: Exception types that trigger another attempt

    Example:
        @retry_with_backoff(max_retries=3, base_delay=0.5)
        async def fetch_rows():
            return await store.select("function_errors")
    """
    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            attempt = 1
            while True:
                try:
                    result = await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error(f"{func.__name__} failed after {attempt} attempts: {e}")
                        raise

                    delay = min(base_delay * exponential_base ** (attempt - 1), max_delay)
                    logger.warning(
                        f"{func.__name__} failed on attempt {attempt}/{max_retries}: {e}. "
                        f"Retrying in {delay:.1f}s"
                    )
                    await asyncio.sleep(delay)
                    attempt += 1
                    continue

                if attempt > 1:
                    logger.info(f"{func.__name__} succeeded on attempt {attempt}/{max_retries}")
                return result

        return wrapper

    return decorator


async def run_detached(
    description: str,
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any
) -> None:
    """
    Run work that outlives the request that scheduled it.

    Exceptions are logged and swallowed; nothing is reported back to the
    caller, which has already received its response.

    Args:
        description: Human readable name of the work, used in logs
        func: Coroutine function to run
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func
    """
    try:
        await func(*args, **kwargs)
    except Exception as e:
        logger.error(f"Detached task '{description}' failed: {e}", exc_info=True)


def log_partial_failure(
    operation_name: str,
    total_items: int,
    successful_items: int,
    failures: list,
    context: dict
) -> None:
    """
    Log the outcome of a batch operation, flagging partial failures.

    Args:
        operation_name: Name of the operation
        total_items: Total number of items processed
        successful_items: Number of successful items
        failures: Identifiers of the items that failed
        context: Additional context information
    """
    failed_items = total_items - successful_items

    if failed_items > 0:
        logger.warning(
            f"Partial failure in {operation_name}: "
            f"{successful_items}/{total_items} succeeded, {failed_items} failed",
            extra={
                "operation": operation_name,
                "total_items": total_items,
                "successful_items": successful_items,
                "failed_items": failed_items,
                "failures": failures[:10],
                "context": context
            }
        )
    else:
        logger.info(
            f"{operation_name} completed successfully: {successful_items}/{total_items}",
            extra={
                "operation": operation_name,
                "total_items": total_items,
                "context": context
            }
        )
