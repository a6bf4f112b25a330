"""GitHub search endpoints.

Search responses wrap their results in an envelope::

    {"total_count": 42, "incomplete_results": false, "items": [...]}

SearchRequest hides everything but ``items`` so that search pages look like
any other listing page to Pagination.
"""

import json
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .exceptions import MalformedResponseError
from .models import Response
from .pagination import Pagination, each, identity

T = TypeVar("T")


class SearchResponse:
    """A response whose body is only the ``items`` of the wrapped one."""

    def __init__(self, response: Response):
        self._response = response

    @property
    def request(self):
        return self._response.request

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def reason(self) -> str:
        return self._response.reason

    @property
    def headers(self) -> dict[str, list[str]]:
        return self._response.headers

    @property
    def binary(self) -> bytes:
        return self._response.binary

    def header(self, name: str) -> list[str]:
        return self._response.header(name)

    @property
    def body(self) -> str:
        try:
            envelope = json.loads(self._response.body)
        except ValueError as e:
            raise MalformedResponseError(f"Search response from {self.request.uri} is not JSON") from e
        if not isinstance(envelope, dict):
            raise MalformedResponseError(
                f"Search response from {self.request.uri} is not a JSON object"
            )
        try:
            items = envelope["items"]
        except KeyError as e:
            raise MalformedResponseError(f"Search response from {self.request.uri} has no 'items'") from e
        if not isinstance(items, list):
            raise MalformedResponseError(
                f"'items' of search response from {self.request.uri} is not an array"
            )
        return json.dumps(items)

    def json(self) -> Any:
        return json.loads(self.body)

    def convert(self, factory):
        return Response.convert(self, factory)


class SearchRequest:
    """Request decorator whose responses are SearchResponse.

    Derived requests are wrapped again, so following a next-page link keeps
    unwrapping the envelope.
    """

    def __init__(self, request):
        if request is None:
            raise ValueError("request can't be None")
        self._request = request

    def __eq__(self, other):
        return isinstance(other, SearchRequest) and self._request == other._request

    def __hash__(self):
        return hash((SearchRequest, self._request))

    def __repr__(self):
        return f"SearchRequest({self._request!r})"

    @property
    def uri(self) -> str:
        return self._request.uri

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def headers(self):
        return self._request.headers

    @property
    def body(self) -> bytes:
        return self._request.body

    def header(self, name: str) -> list[str]:
        return self._request.header(name)

    def with_header(self, name: str, value) -> "SearchRequest":
        if name is None:
            raise ValueError("header name can't be None")
        if value is None:
            raise ValueError("header value can't be None")
        return SearchRequest(self._request.with_header(name, value))

    def reset(self, name: str) -> "SearchRequest":
        if name is None:
            raise ValueError("header name can't be None")
        return SearchRequest(self._request.reset(name))

    def with_method(self, method: str) -> "SearchRequest":
        if method is None:
            raise ValueError("method can't be None")
        return SearchRequest(self._request.with_method(method))

    def with_uri(self, uri) -> "SearchRequest":
        return SearchRequest(self._request.with_uri(uri))

    def with_path(self, path: str) -> "SearchRequest":
        return SearchRequest(self._request.with_path(path))

    def with_param(self, name: str, value) -> "SearchRequest":
        return SearchRequest(self._request.with_param(name, value))

    def with_params(self, **params) -> "SearchRequest":
        return SearchRequest(self._request.with_params(**params))

    def with_body(self, body) -> "SearchRequest":
        return SearchRequest(self._request.with_body(body))

    def through(self, wire_type, *args, **kwargs) -> "SearchRequest":
        return SearchRequest(self._request.through(wire_type, *args, **kwargs))

    def fetch(self) -> SearchResponse:
        """Fetch the wrapped request and hide everything but ``items``."""
        return SearchResponse(self._request.fetch())


@dataclass(frozen=True, init=False)
class SearchPagination(Generic[T]):
    """Every result of one search query, page after page."""

    request: Any
    mapping: Callable[[Any], Iterable[T]]

    def __init__(self, entry, path: str, keywords: str, sort: str, order: str,
                 mapping: Callable[[Any], Iterable[T]]):
        request = entry.with_path(path).with_params(q=keywords, sort=sort, order=order)
        object.__setattr__(self, "request", request)
        object.__setattr__(self, "mapping", mapping)

    def __iter__(self) -> Iterator[T]:
        return iter(Pagination(SearchRequest(self.request), self.mapping))


class Search:
    """Search entry points of the GitHub API."""

    def __init__(self, entry):
        self.entry = entry

    def _search(self, path, keywords, sort, order, mapping):
        return SearchPagination(self.entry, path, keywords, sort, order, mapping or each(identity))

    def repos(self, keywords: str, sort: str = "stars", order: str = "desc", mapping=None) -> SearchPagination:
        return self._search("/search/repositories", keywords, sort, order, mapping)

    def issues(self, keywords: str, sort: str = "created", order: str = "desc", mapping=None) -> SearchPagination:
        return self._search("/search/issues", keywords, sort, order, mapping)

    def users(self, keywords: str, sort: str = "followers", order: str = "desc", mapping=None) -> SearchPagination:
        return self._search("/search/users", keywords, sort, order, mapping)

    def code(self, keywords: str, sort: str = "indexed", order: str = "desc", mapping=None) -> SearchPagination:
        return self._search("/search/code", keywords, sort, order, mapping)
