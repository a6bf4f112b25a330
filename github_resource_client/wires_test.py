"""Unit tests for transport wires."""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from .models import Response
from .request import Request
from .wires import CachingWire, HttpxWire, RetryWire, ThrottleWire, _cache_key

URI = "https://api.github.com/repos/o/r"


@pytest.fixture(autouse=True)
def _no_sleep():
    """Patch out time.sleep in wires to avoid real waits in retry tests."""
    with patch("github_resource_client.wires.time.sleep") as sleep:
        yield sleep


def _response(request, status=200, body=None, headers=None, reason="OK"):
    binary = json.dumps(body).encode() if body is not None else b""
    return Response(request=request, status=status, reason=reason, headers=headers or {}, binary=binary)


def describe_HttpxWire():
    def it_performs_the_exchange():
        seen = []

        def handler(req: httpx.Request):
            seen.append(req)
            return httpx.Response(
                200,
                json={"full_name": "o/r"},
                headers=[("Link", '<a>; rel="next"'), ("X-Dup", "1"), ("X-Dup", "2")],
            )

        wire = HttpxWire(httpx.Client(transport=httpx.MockTransport(handler)))
        request = Request(wire, uri=URI).with_header("Authorization", "bearer t")

        response = request.fetch()

        assert response.status == 200
        assert response.reason == "OK"
        assert response.json() == {"full_name": "o/r"}
        assert response.headers["x-dup"] == ["1", "2"]
        assert response.header("Link") == ['<a>; rel="next"']
        assert response.request is request
        assert seen[0].headers["authorization"] == "bearer t"
        assert str(seen[0].url) == URI

    def it_sends_method_and_body():
        seen = []

        def handler(req: httpx.Request):
            seen.append(req)
            return httpx.Response(201, json={"ref": "refs/heads/x"})

        wire = HttpxWire(httpx.Client(transport=httpx.MockTransport(handler)))

        response = Request(wire, uri=URI).with_method("post").with_body('{"ref": "refs/heads/x"}').fetch()

        assert response.status == 201
        assert seen[0].method == "POST"
        assert seen[0].content == b'{"ref": "refs/heads/x"}'

    def it_propagates_transport_errors():
        def handler(req):
            raise httpx.ConnectError("refused")

        wire = HttpxWire(httpx.Client(transport=httpx.MockTransport(handler)))

        with pytest.raises(httpx.ConnectError):
            Request(wire, uri=URI).fetch()


def describe_ThrottleWire():
    def it_spaces_consecutive_requests(_no_sleep):
        origin = MagicMock(side_effect=lambda r: _response(r))
        request = Request(origin, uri=URI).through(ThrottleWire, 0.001)

        request.fetch()
        request.fetch()

        assert origin.call_count == 2
        _no_sleep.assert_called()

    def it_does_not_throttle_at_zero_rate(_no_sleep):
        origin = MagicMock(side_effect=lambda r: _response(r))
        request = Request(origin, uri=URI).through(ThrottleWire, 0)

        request.fetch()
        request.fetch()

        _no_sleep.assert_not_called()


def describe_RetryWire():
    def _request(responses, retries=30):
        origin = MagicMock(side_effect=responses)
        return Request(origin, uri=URI).through(RetryWire, retries), origin

    def it_returns_successful_responses_unchanged():
        ok = _response(None, 200, {"ok": True})
        request, origin = _request([ok])

        assert request.fetch() is ok
        assert origin.call_count == 1

    def it_retries_rate_limits():
        limited = _response(None, 429, {"message": "rate limit"}, headers={"retry-after": ["0"]})
        ok = _response(None, 200, {"ok": True})
        request, origin = _request([limited, ok])

        assert request.fetch().status == 200
        assert origin.call_count == 2

    def it_retries_403_rate_limits():
        limited = _response(None, 403, {"message": "API rate limit exceeded"})
        ok = _response(None, 200, {"ok": True})
        request, _ = _request([limited, ok])

        assert request.fetch().status == 200

    def it_does_not_retry_other_403s():
        forbidden = _response(None, 403, {"message": "Resource not accessible"})
        request, origin = _request([forbidden])

        assert request.fetch().status == 403
        assert origin.call_count == 1

    def it_retries_5xx():
        request, _ = _request([_response(None, 502), _response(None, 200, {"ok": True})])

        assert request.fetch().status == 200

    def it_retries_dropped_connections():
        request, _ = _request([httpx.ConnectError("failed"), _response(None, 200, {})])

        assert request.fetch().status == 200

    def it_returns_client_errors_without_retrying():
        request, origin = _request([_response(None, 404, {"message": "Not Found"})])

        assert request.fetch().status == 404
        assert origin.call_count == 1

    def it_gives_up_after_retries():
        origin = MagicMock(return_value=_response(None, 502))
        request = Request(origin, uri=URI).through(RetryWire, 3)

        with pytest.raises(RuntimeError, match="failed after 3 retries"):
            request.fetch()
        assert origin.call_count == 3


def describe_CachingWire():
    @pytest.fixture
    def cache_dir(tmp_path):
        d = tmp_path / "cache"
        d.mkdir()
        return d

    def _origin(*bodies, status=200):
        it = iter(bodies)
        return MagicMock(side_effect=lambda r: _response(r, status, next(it), headers={"etag": ['"e1"']}))

    def it_serves_repeated_gets_from_cache(cache_dir):
        origin = _origin({"v": 1}, {"v": 2})
        request = Request(origin, uri=URI).through(CachingWire, cache_dir)

        first = request.fetch()
        second = request.fetch()

        assert first.json() == {"v": 1}
        assert second.json() == {"v": 1}
        assert second.header("etag") == ['"e1"']
        assert second.request == request
        assert origin.call_count == 1
        assert (cache_dir / f"{_cache_key(URI)}.json").exists()

    def it_keys_on_the_full_url(cache_dir):
        origin = _origin({"page": 1}, {"page": 2})
        request = Request(origin, uri=URI).through(CachingWire, cache_dir)

        assert request.fetch().json() == {"page": 1}
        assert request.with_params(page=2).fetch().json() == {"page": 2}
        assert origin.call_count == 2

    def it_only_caches_2xx(cache_dir):
        origin = _origin({"message": "Not Found"}, {"message": "Not Found"}, status=404)
        request = Request(origin, uri=URI).through(CachingWire, cache_dir)

        assert request.fetch().status == 404
        assert request.fetch().status == 404
        assert origin.call_count == 2
        assert not (cache_dir / f"{_cache_key(URI)}.json").exists()

    def it_does_not_cache_other_methods(cache_dir):
        origin = _origin({"id": 1}, {"id": 2}, status=201)
        request = Request(origin, uri=URI).with_method("POST").through(CachingWire, cache_dir)

        request.fetch()
        request.fetch()

        assert origin.call_count == 2
        assert not (cache_dir / f"{_cache_key(URI)}.json").exists()

    def it_skips_cache_reads_but_still_writes(cache_dir):
        origin = _origin({"cached": False}, {"cached": False})
        request = Request(origin, uri=URI).through(CachingWire, cache_dir, skip_cache=True)

        request.fetch()
        request.fetch()

        assert origin.call_count == 2
        assert (cache_dir / f"{_cache_key(URI)}.json").exists()
