"""Graph API transport with retry/backoff and request metrics."""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import requests

from . import config

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class GraphAPIError(TransportError):
    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        error_type: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, status_code=status_code, payload=payload)
        self.code = code
        self.error_type = error_type


@dataclass(frozen=True)
class GraphRequest:
    graph_path: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    http_method: str = "GET"
    api_version: Optional[str] = None
    access_token: Optional[str] = None


class GraphTransport(Protocol):
    def execute(self, request: GraphRequest) -> Dict[str, Any]:
        ...


@dataclass
class RequestMetrics:
    network_places: int = 0
    network_profile: int = 0
    cache_hits_profile: int = 0

    def inc_network(self, kind: str) -> None:
        if kind == "places":
            self.network_places += 1
        elif kind == "profile":
            self.network_profile += 1
        else:
            raise ValueError(f"Unknown request kind: {kind}")

    def inc_cache_hit(self, kind: str) -> None:
        if kind == "profile":
            self.cache_hits_profile += 1
        else:
            raise ValueError(f"Unknown request kind: {kind}")


def graph_error_from_payload(payload: Any, status_code: Optional[int] = None) -> Optional[GraphAPIError]:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message") or "Graph API error"
    return GraphAPIError(
        str(message),
        code=error.get("code"),
        error_type=error.get("type"),
        status_code=status_code,
        payload=payload,
    )


class GraphHttpClient:
    def __init__(
        self,
        base_url: str = config.GRAPH_BASE_URL,
        timeout: int = config.HTTP_TIMEOUT_SECONDS,
        retry_max: int = config.HTTP_RETRY_MAX,
        backoff_base: float = config.HTTP_BACKOFF_BASE,
        backoff_max: float = config.HTTP_BACKOFF_MAX,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_max = max(1, int(retry_max))
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.session = requests.Session()

    def build_url(self, request: GraphRequest) -> str:
        path = request.graph_path if request.graph_path.startswith("/") else f"/{request.graph_path}"
        version = request.api_version or config.GRAPH_API_VERSION
        if version:
            return f"{self.base_url}/{version}{path}"
        return f"{self.base_url}{path}"

    def execute(self, request: GraphRequest) -> Dict[str, Any]:
        url = self.build_url(request)
        params = dict(request.parameters)
        if request.access_token:
            params["access_token"] = request.access_token
        method = request.http_method.upper()

        for attempt in range(1, self.retry_max + 1):
            try:
                resp = self.session.request(method, url, params=params, timeout=self.timeout)
            except requests.RequestException as exc:
                if attempt >= self.retry_max:
                    raise TransportError(f"Request to {request.graph_path} failed: {exc}") from exc
                self._sleep_backoff(attempt)
                continue

            status = resp.status_code
            if status == 200:
                try:
                    payload = resp.json()
                except ValueError as exc:
                    logger.error("Non-JSON response from %s", request.graph_path)
                    raise TransportError(
                        f"Non-JSON response from {request.graph_path}", status_code=status
                    ) from exc
                error = graph_error_from_payload(payload, status)
                if error is not None:
                    raise error
                return payload

            if status in (429, 500, 502, 503, 504):
                logger.warning("HTTP %s from %s (attempt %s)", status, request.graph_path, attempt)
                if attempt < self.retry_max:
                    if not self._sleep_retry_after(resp):
                        self._sleep_backoff(attempt)
                    continue

            # Non-retryable, or out of attempts
            logger.error("HTTP %s from %s", status, request.graph_path)
            raise self._error_from_response(resp)

        raise RuntimeError("Unexpected HTTP retry loop exit")

    def _error_from_response(self, resp: requests.Response) -> TransportError:
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        error = graph_error_from_payload(payload, resp.status_code)
        if error is not None:
            return error
        return TransportError(f"HTTP {resp.status_code}", status_code=resp.status_code)

    def _sleep_backoff(self, attempt: int) -> None:
        base = min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)
        jitter = random.uniform(0, self.backoff_base)
        time.sleep(base + jitter)

    def _sleep_retry_after(self, resp: requests.Response) -> bool:
        retry_after = resp.headers.get("Retry-After")
        if not retry_after:
            return False
        try:
            delay = float(retry_after)
        except ValueError:
            return False
        delay = max(0.0, min(delay, self.backoff_max))
        time.sleep(delay)
        return True
