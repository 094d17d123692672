"""HTTP client with timeouts and opt-in retries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from mobilithek_csv.common.constants import USER_AGENT
from mobilithek_csv.common.errors import FetchError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0

    def as_tuple(self) -> tuple[float, float]:
        return self.connect, self.read


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(FetchError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


@dataclass(frozen=True)
class HttpResult:
    status: int
    reason: str
    content_type: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def from_response(cls, response: requests.Response) -> "HttpResult":
        return cls(
            status=response.status_code,
            reason=response.reason or "",
            content_type=response.headers.get("Content-Type", ""),
            text=response.text,
        )


class HttpClient:
    """Thin wrapper over a ``requests.Session``.

    Non-2xx replies come back as ``HttpResult`` values so callers can build
    their own messages from the body. Only transport failures raise.
    """

    def __init__(self, *, timeout: TimeoutConfig | None = None, retry: RetryConfig | None = None) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(initial=self.retry.multiplier, max=self.retry.max_wait, jitter=1.0),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )

    def _send(self, method: str, url: str, headers: dict[str, str], timeout: TimeoutConfig, body: Any) -> HttpResult:
        try:
            response = self.session.request(
                method=method,
                url=url,
                json=body,
                headers={"User-Agent": USER_AGENT, **headers},
                timeout=timeout.as_tuple(),
            )
        except requests.RequestException as exc:
            raise HttpRequestError(f"Request to {url} failed: {exc}") from exc

        # a single attempt hands the retryable status back to the caller
        if response.status_code in RETRYABLE_STATUS_CODES and self.retry.max_attempts > 1:
            raise RetryableHttpError(f"Retryable HTTP status: {response.status_code}")
        return HttpResult.from_response(response)

    def request(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> HttpResult:
        return self._retrying()(self._send, method, url, headers or {}, timeout or self.timeout, json_body)

    def get_text(self, url: str, *, headers: dict[str, str] | None = None, timeout: TimeoutConfig | None = None) -> HttpResult:
        return self.request("GET", url, headers=headers, timeout=timeout)

    def post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> HttpResult:
        merged = {"Content-Type": "application/json", "Accept": "application/json", **(headers or {})}
        return self.request("POST", url, json_body=payload, headers=merged, timeout=timeout)
