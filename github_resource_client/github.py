"""GitHub API entry point: an authenticated base Request plus the search facade."""

from pathlib import Path

import httpx

from .models import ACCEPT_JSON
from .pagination import Pagination, each, identity
from .request import Request
from .search import Search
from .settings import get_settings
from .wires import REQUESTS_PER_SECOND, CachingWire, HttpxWire, RetryWire, ThrottleWire


class Github:
    """Entry point to the real GitHub API.

    Auth is taken from GITHUB_TOKEN when no token is passed; anonymous
    access works with lower rate limits. Requests go through throttle and
    retry wires, and through a Cachetta cache when ``cache_dir`` is set.
    """

    def __init__(self, token: str | None = None, cache_dir: Path | None = None,
                 skip_cache: bool = False, per_second: float | None = None,
                 client: httpx.Client | None = None):
        settings = get_settings()
        token = token or settings.github_token
        cache_dir = cache_dir or settings.github_cache_dir
        self._client = client or httpx.Client(timeout=settings.github_timeout)
        self.per_page = settings.github_per_page

        request = Request(HttpxWire(self._client), uri=settings.github_api_base)
        request = request.with_header("Accept", ACCEPT_JSON)
        if token:
            request = request.with_header("Authorization", f"bearer {token}")
        request = request.through(ThrottleWire, REQUESTS_PER_SECOND if per_second is None else per_second)
        request = request.through(RetryWire)
        if cache_dir:
            request = request.through(CachingWire, cache_dir, skip_cache=skip_cache)
        self._entry = request

    def entry(self) -> Request:
        """The base request every resource request derives from."""
        return self._entry

    def search(self) -> Search:
        return Search(self._entry.with_params(per_page=self.per_page))

    def paginate(self, path: str, mapping=None, **params) -> Pagination:
        """Every element of a plain listing endpoint such as ``/user/repos``."""
        params.setdefault("per_page", self.per_page)
        request = self._entry.with_path(path).with_params(**params)
        return Pagination(request, mapping or each(identity))

    def close(self):
        self._client.close()


_githubs: dict[tuple, Github] = {}


def get_github(cache_dir=None, skip_cache=False) -> Github:
    """Get or create a Github entry point with the given configuration."""
    key = (str(cache_dir) if cache_dir else None, skip_cache)
    if key not in _githubs:
        _githubs[key] = Github(cache_dir=cache_dir, skip_cache=skip_cache)
    return _githubs[key]
