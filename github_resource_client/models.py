"""Data models and constants for the GitHub resource client."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from .exceptions import ResponseConversionError

if TYPE_CHECKING:
    from .request import Request

API_BASE = "https://api.github.com"
ACCEPT_JSON = "application/vnd.github+json"

T = TypeVar("T")


@dataclass(frozen=True)
class Response:
    """One completed HTTP exchange.

    ``headers`` maps lower-cased header names to every value received, in
    order. ``request`` is the request that produced this response.
    """

    request: "Request"
    status: int
    reason: str = ""
    headers: dict[str, list[str]] = field(default_factory=dict)
    binary: bytes = b""

    @property
    def body(self) -> str:
        return self.binary.decode("utf-8")

    def header(self, name: str) -> list[str]:
        """All values of a header, case-insensitively."""
        wanted = name.lower()
        values = []
        for key, vals in self.headers.items():
            if key.lower() == wanted:
                values.extend(vals)
        return values

    def json(self) -> Any:
        return json.loads(self.body)

    def convert(self, factory: Callable[["Response"], T]) -> T:
        """Build a typed view of this response with ``factory``.

        A factory that can't be called with a single response argument is
        reported as ResponseConversionError.
        """
        try:
            return factory(self)
        except TypeError as e:
            raise ResponseConversionError(
                f"Can't convert response with {getattr(factory, '__name__', factory)!r}"
            ) from e
