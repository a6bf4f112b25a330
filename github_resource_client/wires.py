"""Wires: the layers a Request is fetched through.

A wire is any callable taking a Request and returning a Response. HttpxWire
does the network exchange; the others decorate an origin wire and are
attached with ``Request.through(WireType, ...)``.
"""

import hashlib
import logging
import threading
import time
from datetime import timedelta
from pathlib import Path

import httpx
from cachetta import Cachetta

from .models import Response

log = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".cache/github-resource-client"
DEFAULT_DURATION = timedelta(days=30)

# Rate limit backoff settings
BACKOFF_FACTOR = 1.5
MAX_RETRIES = 30

# Steady-state throttle: 1.3 req/sec = ~4,680/hour (under 5K limit)
REQUESTS_PER_SECOND = 1.3


class HttpxWire:
    """Performs the exchange with an httpx client."""

    def __init__(self, client: httpx.Client):
        self.client = client

    def __call__(self, request) -> Response:
        resp = self.client.request(
            request.method,
            request.uri,
            headers=list(request.headers),
            content=request.body or None,
        )
        headers: dict[str, list[str]] = {}
        for name, value in resp.headers.multi_items():
            headers.setdefault(name.lower(), []).append(value)
        return Response(
            request=request,
            status=resp.status_code,
            reason=resp.reason_phrase,
            headers=headers,
            binary=resp.content,
        )


class ThrottleWire:
    """Spaces requests evenly to stay under secondary rate limits."""

    def __init__(self, origin, per_second: float = REQUESTS_PER_SECOND):
        self.origin = origin
        self._lock = threading.Lock()
        self._last_request_time = 0.0
        self._min_interval = 1.0 / per_second if per_second else 0.0

    def _throttle(self):
        with self._lock:
            now = time.time()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval:
                time.sleep(self._min_interval - elapsed)
            self._last_request_time = time.time()

    def __call__(self, request) -> Response:
        self._throttle()
        return self.origin(request)


def _parse_retry_after(response: Response) -> float | None:
    values = response.header("retry-after")
    if not values:
        return None
    try:
        return float(values[0])
    except ValueError:
        return None


def _is_rate_limited(response: Response) -> bool:
    if response.status == 429:
        return True
    return response.status == 403 and "rate limit" in response.binary.decode("utf-8", "replace").lower()


class RetryWire:
    """Retries rate-limited, 5xx and dropped-connection exchanges."""

    def __init__(self, origin, retries: int = MAX_RETRIES):
        self.origin = origin
        self.retries = retries

    def __call__(self, request) -> Response:
        for attempt in range(self.retries):
            try:
                response = self.origin(request)
            except (httpx.ConnectError, httpx.RemoteProtocolError, httpx.ReadError) as e:
                log.warning("%s %s: %s, retrying (%d/%d)", request.method, request.uri, e, attempt + 1, self.retries)
                time.sleep(BACKOFF_FACTOR**attempt)
                continue

            if _is_rate_limited(response):
                wait = _parse_retry_after(response) or 5
                log.warning("Rate limited on %s, waiting %.1fs", request.uri, BACKOFF_FACTOR**attempt * wait)
                time.sleep(BACKOFF_FACTOR**attempt * wait)
                continue

            if response.status >= 500:
                log.warning(
                    "HTTP %d from %s, retrying (%d/%d)", response.status, request.uri, attempt + 1, self.retries
                )
                time.sleep(BACKOFF_FACTOR**attempt)
                continue

            return response

        raise RuntimeError(
            f"GitHub API request failed after {self.retries} retries: {request.method} {request.uri}"
        )


class _NotCacheable(Exception):
    """Carries a non-2xx response out of the cached function so it isn't stored."""

    def __init__(self, response):
        self.response = response


def _cache_key(uri: str) -> str:
    return hashlib.sha256(f"GET|{uri}".encode()).hexdigest()[:16]


class CachingWire:
    """Caches successful GET responses on disk with Cachetta.

    One file per URL, named after a hash of it; Cachetta owns the file
    format. ``skip_cache`` bypasses reads but still writes.
    """

    def __init__(self, origin, cache_dir: Path | str | None = None, skip_cache: bool = False,
                 duration: timedelta = DEFAULT_DURATION):
        self.origin = origin
        self.cache_dir = Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR
        self.skip_cache = skip_cache

        def _cache_path(uri, request=None):
            return self.cache_dir / f"{_cache_key(uri)}.json"

        # Cachetta handles caching; exceptions propagate (not cached).
        def _do_fetch(uri, request):
            response = self.origin(request)
            if not 200 <= response.status < 300:
                raise _NotCacheable(response)
            return {
                "status": response.status,
                "reason": response.reason,
                "headers": response.headers,
                "body": response.body,
            }

        cache = Cachetta(path=_cache_path, duration=duration)
        self._cached_fetch = cache(_do_fetch)
        self._skip_read_fetch = cache.copy(read=False)(_do_fetch)

    def __call__(self, request) -> Response:
        if request.method != "GET":
            return self.origin(request)
        fetch = self._skip_read_fetch if self.skip_cache else self._cached_fetch
        try:
            data = fetch(request.uri, request)
        except _NotCacheable as e:
            return e.response
        return Response(
            request=request,
            status=data["status"],
            reason=data.get("reason", ""),
            headers={k: list(v) for k, v in data.get("headers", {}).items()},
            binary=data["body"].encode("utf-8"),
        )
