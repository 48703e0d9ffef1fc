"""HTTP client with timeouts and an optional retry policy."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from bomfeeds.common.constants import USER_AGENT
from bomfeeds.common.errors import TransportError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}
RETRY_LATER = "The server with the feed is not responding. Please retry again later."


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 30.0


class RetryableTransportError(TransportError):
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
        out = {"User-Agent": USER_AGENT, "Accept": "application/xml, text/xml, */*"}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status_or_retry(self, response: requests.Response, url: str) -> None:
        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableTransportError(f"HTTP status {status} from {url}. {RETRY_LATER}")
        if status >= 400:
            raise TransportError(f"HTTP status {status} from {url}. {RETRY_LATER}")

    def _request_bytes(self, url: str, headers: dict[str, str] | None) -> bytes:
        try:
            response = self.session.request(
                method="GET",
                url=url,
                headers=self._headers(headers),
                timeout=(self.timeout.connect, self.timeout.read),
            )
        except requests.RequestException as exc:
            raise RetryableTransportError(f"Request to {url} failed. {RETRY_LATER}") from exc
        self._raise_for_status_or_retry(response, url)
        return response.content

    def get_bytes(self, url: str, *, headers: dict[str, str] | None = None) -> bytes:
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableTransportError),
            reraise=True,
        )
        def _wrapped() -> bytes:
            return self._request_bytes(url, headers)

        return _wrapped()
