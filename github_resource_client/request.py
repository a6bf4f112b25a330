"""Immutable, fetchable HTTP request."""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

import httpx

from .models import API_BASE

if TYPE_CHECKING:
    from .models import Response


def _require(value, message):
    if value is None:
        raise ValueError(message)
    return value


@dataclass(frozen=True)
class Request:
    """A configured, not-yet-executed HTTP exchange.

    Every ``with_*`` method returns a new request; nothing mutates in place.
    ``wire`` is the callable that turns a request into a Response, usually an
    HttpxWire possibly wrapped by other wires through ``through()``.
    """

    wire: Any
    uri: str = API_BASE
    method: str = "GET"
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""

    def with_header(self, name: str, value: Any) -> "Request":
        _require(name, "header name can't be None")
        _require(value, "header value can't be None")
        return replace(self, headers=self.headers + ((name, str(value)),))

    def reset(self, name: str) -> "Request":
        """Drop every header called ``name``."""
        _require(name, "header name can't be None")
        wanted = name.lower()
        return replace(
            self, headers=tuple((k, v) for k, v in self.headers if k.lower() != wanted)
        )

    def with_method(self, method: str) -> "Request":
        _require(method, "method can't be None")
        return replace(self, method=method.upper())

    def with_uri(self, uri: str | httpx.URL) -> "Request":
        _require(uri, "uri can't be None")
        return replace(self, uri=str(uri))

    def with_path(self, path: str) -> "Request":
        """Replace the URL path, keeping scheme, host and query."""
        _require(path, "path can't be None")
        ep = path if path.startswith("/") else f"/{path}"
        return self.with_uri(httpx.URL(self.uri).copy_with(path=ep))

    def with_param(self, name: str, value: Any) -> "Request":
        _require(name, "query parameter name can't be None")
        _require(value, "query parameter value can't be None")
        return self.with_uri(httpx.URL(self.uri).copy_add_param(name, str(value)))

    def with_params(self, **params: Any) -> "Request":
        request = self
        for name, value in params.items():
            request = request.with_param(name, value)
        return request

    def with_body(self, body: bytes | str) -> "Request":
        _require(body, "body can't be None")
        if isinstance(body, str):
            body = body.encode("utf-8")
        return replace(self, body=body)

    def through(self, wire_type, *args, **kwargs) -> "Request":
        """Wrap the current wire: ``wire_type(current_wire, *args, **kwargs)``."""
        return replace(self, wire=wire_type(self.wire, *args, **kwargs))

    def header(self, name: str) -> list[str]:
        wanted = name.lower()
        return [v for k, v in self.headers if k.lower() == wanted]

    def fetch(self) -> "Response":
        return self.wire(self)
