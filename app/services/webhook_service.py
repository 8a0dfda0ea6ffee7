"""Webhook submission client with per-attempt timeout and retry"""
import asyncio
import functools
import httpx
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from app.config import Settings
from app.utils.retry import backoff_delay, retry_async

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 30.0  # seconds
WEBHOOK_ATTEMPTS = 3


class WebhookError(Exception):
    """Failure delivering a payload to a webhook"""

    def __init__(self, status: int = 0, status_text: str = "", message: Optional[str] = None):
        self.status = status
        self.status_text = status_text
        super().__init__(message or f"Webhook error: {status} {status_text}")

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500


class WebhookNetworkError(WebhookError):
    """Endpoint unreachable"""

    def __init__(self, message: str = "Failed to reach webhook endpoint"):
        super().__init__(0, "Network Error", message)


class WebhookTimeoutError(WebhookError):
    """Attempt exceeded its timeout"""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(0, "Timeout", f"Request timed out after {int(timeout * 1000)}ms")


class WebhookStatusError(WebhookError):
    """Non-2xx response"""

    def __init__(self, status: int, status_text: str):
        super().__init__(status, status_text, f"Webhook request failed with status {status}")


class WebhookDecodeError(WebhookError):
    """Response body is not valid JSON"""

    def __init__(self, status: int):
        super().__init__(status, "Invalid JSON", "Webhook returned an invalid JSON response")


class WebhookNotConfiguredError(WebhookError):
    """Form has no webhook URL"""

    def __init__(self):
        super().__init__(0, "", "Webhook URL is not configured")


def is_retryable(error: Exception) -> bool:
    """Everything except a 4xx answer is worth another attempt"""
    if isinstance(error, WebhookNotConfiguredError):
        return False
    if isinstance(error, WebhookError):
        return not error.is_client_error
    return True


class WebhookClient:
    """
    Deliver JSON payloads to admin-configured webhook URLs

    Each submit() makes up to max_attempts sequential POSTs. 4xx responses
    are final; network errors, timeouts, 5xx and undecodable bodies are
    retried after min(backoff_base * 2^attempt, backoff_max) seconds.
    """

    def __init__(
        self,
        timeout: float = WEBHOOK_TIMEOUT,
        max_attempts: int = WEBHOOK_ATTEMPTS,
        backoff_base: float = 1.0,
        backoff_max: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.transport = transport
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "WebhookClient":
        return cls(
            timeout=settings.webhook_timeout_seconds,
            max_attempts=settings.webhook_max_attempts,
            backoff_base=settings.webhook_backoff_base_seconds,
            backoff_max=settings.webhook_backoff_max_seconds,
            **kwargs
        )

    def retry_delay(self, attempt: int) -> float:
        return backoff_delay(attempt, base=self.backoff_base, cap=self.backoff_max)

    async def _post(self, url: str, data: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.post(
                url,
                json=data,
                headers={"Content-Type": "application/json"}
            )

    async def _attempt(self, url: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Make a single webhook request bounded by the attempt timeout"""
        try:
            response = await asyncio.wait_for(self._post(url, data), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise WebhookTimeoutError(self.timeout)
        except httpx.RequestError as e:
            logger.debug(f"Webhook transport error: {e}")
            raise WebhookNetworkError()

        if not response.is_success:
            raise WebhookStatusError(response.status_code, response.reason_phrase)

        try:
            body = response.json()
        except ValueError:
            raise WebhookDecodeError(response.status_code)

        if not isinstance(body, dict):
            return {"result": body}
        return body

    async def submit(self, url: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit form data to a webhook

        Args:
            url: Absolute webhook URL
            data: Field-name to value map, sent as the raw JSON body

        Returns:
            Decoded JSON response body

        Raises:
            WebhookError: 4xx immediately, anything else once attempts are exhausted
        """
        if not url:
            raise WebhookNotConfiguredError()

        try:
            result = await retry_async(
                functools.partial(self._attempt, url, data),
                max_attempts=self.max_attempts,
                should_retry=is_retryable,
                delay_for=self.retry_delay,
                sleep=self.sleep,
            )
        except WebhookError as e:
            logger.error(f"Webhook submission to {url} failed: {e}")
            raise

        logger.info(f"Webhook submission to {url} succeeded")
        return result
