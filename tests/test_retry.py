import pytest

from app.utils import retry
from app.utils.retry import backoff_delay, retry_async, retry_supabase_query


def test_backoff_delay_doubles_then_caps():
    assert [backoff_delay(n) for n in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]
    assert backoff_delay(3, base=0.5, cap=4.0) == 4.0


async def test_retry_async_stops_on_non_retryable_error():
    calls = []
    slept = []

    async def func():
        calls.append(1)
        raise ValueError("bad input")

    async def sleep(delay):
        slept.append(delay)

    with pytest.raises(ValueError):
        await retry_async(func, max_attempts=3, should_retry=lambda e: False, sleep=sleep)

    assert len(calls) == 1
    assert slept == []


async def test_retry_async_does_not_sleep_after_last_attempt():
    slept = []

    async def func():
        raise RuntimeError("down")

    async def sleep(delay):
        slept.append(delay)

    with pytest.raises(RuntimeError):
        await retry_async(func, max_attempts=3, sleep=sleep)

    assert slept == [1.0, 2.0]


def test_retry_supabase_query_retries_connection_resets(monkeypatch):
    monkeypatch.setattr(retry.time, "sleep", lambda delay: None)
    attempts = []

    def query():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionResetError("Connection reset by peer")
        return "rows"

    assert retry_supabase_query(query) == "rows"
    assert len(attempts) == 3


def test_retry_supabase_query_raises_other_errors_immediately(monkeypatch):
    monkeypatch.setattr(retry.time, "sleep", lambda delay: None)
    attempts = []

    def query():
        attempts.append(1)
        raise KeyError("missing column")

    with pytest.raises(KeyError):
        retry_supabase_query(query)
    assert len(attempts) == 1
