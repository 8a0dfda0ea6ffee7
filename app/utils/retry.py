"""
Retry utilities: exponential backoff for webhook delivery and
transient Supabase connection resets.
"""
import asyncio
import time
import logging
from typing import Awaitable, Callable, Any

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base: float = 1.0, cap: float = 10.0) -> float:
    """
    Delay in seconds before retrying after a failed attempt.

    Args:
        attempt: Zero-based index of the attempt that just failed
        base: Delay after the first failure
        cap: Upper bound on any single delay

    Returns:
        min(base * 2^attempt, cap)
    """
    return min(base * (2 ** attempt), cap)


async def retry_async(
    func: Callable[[], Awaitable[Any]],
    max_attempts: int = 3,
    should_retry: Callable[[Exception], bool] = lambda e: True,
    delay_for: Callable[[int], float] = backoff_delay,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """
    Await func() until it succeeds or the attempt budget is spent.

    Attempts run strictly one after another. The delay is slept between
    attempts only, never after the final one. An exception for which
    should_retry() is False propagates immediately.

    Usage:
        result = await retry_async(
            lambda: post_json(url, data),
            should_retry=lambda e: not is_client_error(e)
        )

    Returns:
        The first successful result

    Raises:
        The last exception observed
    """
    for attempt in range(max_attempts):
        try:
            return await func()
        except Exception as e:
            if not should_retry(e):
                raise
            if attempt == max_attempts - 1:
                raise

            delay = delay_for(attempt)
            logger.warning(
                f"Attempt {attempt + 1}/{max_attempts} failed: {e}. "
                f"Retrying in {delay}s..."
            )
            await sleep(delay)

    raise RuntimeError("retry_async called with max_attempts < 1")


def retry_supabase_query(query_func: Callable, max_retries: int = 3) -> Any:
    """
    Execute a Supabase query with retry logic for transient errors.

    Usage:
        result = retry_supabase_query(
            lambda: get_supabase_admin().table("tools").select("*").execute()
        )

    Args:
        query_func: A callable that executes the Supabase query
        max_retries: Maximum number of retry attempts

    Returns:
        The query result
    """
    base_delay = 0.5

    for attempt in range(max_retries + 1):
        try:
            return query_func()
        except Exception as e:
            error_str = str(e).lower()
            transient = (
                isinstance(e, ConnectionError)
                or "connection reset" in error_str
                or "errno 104" in error_str
            )
            if transient and attempt < max_retries:
                delay = backoff_delay(attempt, base=base_delay, cap=4.0)
                logger.warning(
                    f"Supabase connection reset, retry {attempt + 1}/{max_retries}. "
                    f"Waiting {delay}s..."
                )
                time.sleep(delay)
                continue
            raise
