"""HTTP access to the wallet execution backend with timeout handling and retry logic.

Only idempotent reads are retried. Submissions and status polls pass
``retryable=False`` so each call is exactly one request.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NetworkErrorType(Enum):
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    UNKNOWN = "unknown"


@dataclass
class NetworkError(Exception):
    error_type: NetworkErrorType
    message: str
    original_error: Exception | None = None
    status_code: int | None = None
    response_text: str | None = None
    response_data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message

    @property
    def response_received(self) -> bool:
        return self.error_type == NetworkErrorType.HTTP_ERROR and (
            self.status_code is not None
        )

    @property
    def remote_message(self) -> str | None:
        if self.response_data:
            message = self.response_data.get("message") or self.response_data.get(
                "detail"
            )
            if message:
                return str(message)
        return self.response_text or None


@dataclass
class TimeoutConfig:
    connect_timeout: float = 5.0
    read_timeout: float = 10.0

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


@dataclass
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    retryable_status_codes: set[int] = field(
        default_factory=lambda: {408, 429, 500, 502, 503, 504}
    )

    def calculate_delay(self, attempt: int) -> float:
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)


DEFAULT_TIMEOUT_CONFIG = TimeoutConfig()
DEFAULT_RETRY_CONFIG = RetryConfig()


def classify_error(error: Exception) -> NetworkErrorType:
    if isinstance(error, Timeout):
        return NetworkErrorType.TIMEOUT
    elif isinstance(error, ConnectionError):
        return NetworkErrorType.CONNECTION_ERROR
    elif isinstance(error, HTTPError):
        return NetworkErrorType.HTTP_ERROR
    return NetworkErrorType.UNKNOWN


def _parse_error_body(response: Any) -> dict[str, Any] | None:
    if response is None:
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def create_network_error(
    error: Exception, base_url: str, context: str = ""
) -> NetworkError:
    error_type = classify_error(error)
    context_prefix = f"{context}: " if context else ""

    if error_type == NetworkErrorType.TIMEOUT:
        message = (
            f"{context_prefix}Connection timeout. Backend may be unavailable: {base_url}"
        )
    elif error_type == NetworkErrorType.CONNECTION_ERROR:
        message = (
            f"{context_prefix}Cannot connect to backend: {base_url}. "
            "Check your network connection."
        )
    elif error_type == NetworkErrorType.HTTP_ERROR:
        response = getattr(error, "response", None)
        status_code = getattr(response, "status_code", None)
        response_text = getattr(response, "text", None)
        response_data = _parse_error_body(response)
        message = f"{context_prefix}HTTP error {status_code}: {response_text or 'Unknown error'}"
        return NetworkError(
            error_type=error_type,
            message=message,
            original_error=error,
            status_code=status_code,
            response_text=response_text,
            response_data=response_data,
        )
    else:
        message = f"{context_prefix}Network error: {str(error)}"

    return NetworkError(
        error_type=error_type,
        message=message,
        original_error=error,
    )


def should_retry(error: Exception, retry_config: RetryConfig) -> bool:
    if isinstance(error, Timeout):
        return True
    if isinstance(error, ConnectionError):
        return True
    if isinstance(error, HTTPError):
        status_code = getattr(error.response, "status_code", None)
        if status_code and status_code in retry_config.retryable_status_codes:
            return True
    return False


class NetworkClient:
    def __init__(
        self,
        base_url: str,
        timeout_config: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_config = timeout_config or DEFAULT_TIMEOUT_CONFIG
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG

    def _execute_with_retry(
        self,
        operation: Callable[[], T],
        context: str = "",
        retryable: bool = True,
        stop_retrying: Callable[[], bool] | None = None,
    ) -> T:
        last_error: Exception | None = None
        max_retries = self.retry_config.max_retries if retryable else 0

        for attempt in range(max_retries + 1):
            if attempt > 0 and stop_retrying and stop_retrying():
                logger.info("Retries abandoned after %d attempt(s)", attempt)
                break
            try:
                return operation()
            except Exception as e:
                last_error = e

                if attempt < max_retries and should_retry(e, self.retry_config):
                    delay = self.retry_config.calculate_delay(attempt)
                    logger.warning(
                        "Network operation failed (attempt %d/%d), retrying in %.1fs: %s",
                        attempt + 1,
                        max_retries + 1,
                        delay,
                        str(e),
                    )
                    time.sleep(delay)
                else:
                    break

        raise create_network_error(
            last_error or Exception("Unknown error"), self.base_url, context
        )

    def get(
        self,
        endpoint: str,
        context: str = "",
        retryable: bool = True,
        stop_retrying: Callable[[], bool] | None = None,
        **kwargs,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        timeout = kwargs.pop("timeout", self.timeout_config.request_timeout)

        def operation() -> dict[str, Any]:
            response = requests.get(url, timeout=timeout, **kwargs)
            response.raise_for_status()
            return response.json()

        return self._execute_with_retry(operation, context, retryable, stop_retrying)

    def get_optional(
        self,
        endpoint: str,
        context: str = "",
        retryable: bool = True,
        **kwargs,
    ) -> dict[str, Any] | None:
        url = f"{self.base_url}{endpoint}"
        timeout = kwargs.pop("timeout", self.timeout_config.request_timeout)

        def operation() -> dict[str, Any] | None:
            response = requests.get(url, timeout=timeout, **kwargs)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

        return self._execute_with_retry(operation, context, retryable)

    def post(
        self,
        endpoint: str,
        context: str = "",
        retryable: bool = True,
        **kwargs,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        timeout = kwargs.pop("timeout", self.timeout_config.request_timeout)

        def operation() -> dict[str, Any]:
            response = requests.post(url, timeout=timeout, **kwargs)
            response.raise_for_status()
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError:
                return {"message": response.text}

        return self._execute_with_retry(operation, context, retryable)
