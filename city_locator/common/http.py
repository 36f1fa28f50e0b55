"""HTTP client with retries and timeouts for remote dataset downloads."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from city_locator.common.constants import USER_AGENT
from city_locator.common.errors import DatasetError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 5
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(DatasetError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": "text/csv, text/plain, */*"}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status_or_retry(self, response: requests.Response) -> None:
        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(f"Retryable HTTP status: {status}")
        if status >= 400:
            raise HttpRequestError(f"HTTP status: {status}")

    def _request_text(self, url: str, *, headers: dict[str, str] | None = None, encoding: str | None = None) -> str:
        try:
            response = self.session.request(
                method="GET",
                url=url,
                headers=self._headers(headers),
                timeout=(self.timeout.connect, self.timeout.read),
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RetryableHttpError(f"Transport failure for {url}: {exc}") from exc
        self._raise_for_status_or_retry(response)
        if encoding:
            response.encoding = encoding
        return response.text

    def get_text(self, url: str, *, headers: dict[str, str] | None = None, encoding: str | None = None) -> str:
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        def _wrapped() -> str:
            return self._request_text(url, headers=headers, encoding=encoding)

        return _wrapped()
