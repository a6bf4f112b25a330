"""Lazy iteration over nodes of the fake document."""

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar
from xml.etree.ElementTree import Element

from .storage import XmlStorage

T = TypeVar("T")


class FakeIterable(Generic[T]):
    """Handles for every node matching ``xpath``, re-queried on each ``iter()``."""

    def __init__(self, storage: XmlStorage, xpath: str, mapping: Callable[[Element], T],
                 condition: Callable[[Element], bool] | None = None):
        self.storage = storage
        self.xpath = xpath
        self.mapping = mapping
        self.condition = condition

    def __iter__(self) -> Iterator[T]:
        for node in self.storage.nodes(self.xpath):
            if self.condition is None or self.condition(node):
                yield self.mapping(node)
