"""Lazy iteration over paginated GitHub listings.

GitHub announces further pages in the ``Link`` response header::

    <https://api.github.com/...&page=2>; rel="next", <...&page=5>; rel="last"

Pagination follows ``rel="next"`` until a response carries none.
"""

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .exceptions import UnexpectedStatusError

log = logging.getLogger(__name__)

T = TypeVar("T")

_LINK_RE = re.compile(r'\s*<([^>]+)>\s*;(.*)')
_REL_RE = re.compile(r'rel\s*=\s*"?([^";]+)"?')


def parse_links(values: list[str]) -> dict[str, str]:
    """Map each ``rel`` of one or more Link header values to its URL."""
    links = {}
    for value in values:
        for part in value.split(","):
            match = _LINK_RE.match(part)
            if not match:
                continue
            url, params = match.groups()
            rel = _REL_RE.search(params)
            if rel:
                for name in rel.group(1).split():
                    links[name] = url
    return links


@dataclass(frozen=True)
class _Each(Generic[T]):
    fn: Callable[[Any], T]

    def __call__(self, page) -> list[T]:
        return [self.fn(item) for item in page]


def each(fn: Callable[[Any], T]) -> Callable[[Any], list[T]]:
    """Turn a per-element function into a page mapping.

    Mappings built from the same function compare equal.
    """
    return _Each(fn)


def identity(item):
    return item


@dataclass(frozen=True)
class Pagination(Generic[T]):
    """Elements of every page of a listing, fetched on demand.

    ``mapping`` turns one page's parsed JSON into the elements of that page.
    Each ``iter()`` starts again from the first page; nothing is fetched
    until the first element is requested and no page is cached between
    iterators.
    """

    request: Any
    mapping: Callable[[Any], Iterable[T]]

    def __iter__(self) -> Iterator[T]:
        request = self.request
        page = 0
        while request is not None:
            response = request.fetch()
            page += 1
            if response.status != 200:
                raise UnexpectedStatusError(response)
            log.debug("Fetched page %d of %s", page, request.uri)
            yield from self.mapping(response.json())
            nxt = parse_links(response.header("link")).get("next")
            request = request.with_uri(nxt) if nxt else None
