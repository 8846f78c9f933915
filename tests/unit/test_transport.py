"""
Unit tests for HttpTransport.

HTTP is faked with httpx.MockTransport; retry backoff is zeroed so the
retry tests run instantly.
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from myft_client.config import HttpSettings
from myft_client.errors import NotFoundError, ShapeError, TransportError
from myft_client.graph.request import build_request
from myft_client.graph.transport import HttpTransport, is_retryable_error, parse_json

URL = "https://api.example.com/v3/user/u1"


def make_transport(handler, max_attempts: int = 3) -> HttpTransport:
    settings = HttpSettings(max_attempts=max_attempts, backoff_multiplier=0.0, backoff_max=0.0)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpTransport(settings, client=client)


class TestExecute:
    @pytest.mark.asyncio
    async def test_success_returns_response(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"uuid": "u1"})

        transport = make_transport(handler)
        req = build_request("GET", URL, params={"page": 1, "noEvent": False}, api_key="k")
        response = await transport.execute(req)

        assert response.json() == {"uuid": "u1"}
        assert seen[0].url.params["page"] == "1"
        assert seen[0].url.params["noEvent"] == "false"
        assert seen[0].headers["X-API-KEY"] == "k"

    @pytest.mark.asyncio
    async def test_body_sent(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(200, json={})

        transport = make_transport(handler)
        await transport.execute(build_request("POST", URL, data={"uuid": "c1"}))
        assert bodies == [b'{"uuid": "c1"}']

    @pytest.mark.asyncio
    async def test_404_raises_not_found_without_retry(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404, json={"message": "not found"})

        transport = make_transport(handler)
        with pytest.raises(NotFoundError) as exc_info:
            await transport.execute(build_request("GET", URL))

        assert len(calls) == 1
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    async def test_4xx_raises_transport_error_without_retry(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400)

        transport = make_transport(handler)
        with pytest.raises(TransportError) as exc_info:
            await transport.execute(build_request("POST", URL, data={}))

        assert len(calls) == 1
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_5xx_retried_then_succeeds(self):
        statuses = iter([503, 502, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            status = next(statuses)
            return httpx.Response(status, json={"ok": True} if status == 200 else None)

        transport = make_transport(handler)
        response = await transport.execute(build_request("GET", URL))
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_5xx_exhausts_attempts(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        transport = make_transport(handler, max_attempts=2)
        with pytest.raises(TransportError) as exc_info:
            await transport.execute(build_request("GET", URL))

        assert len(calls) == 2
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_network_error_wrapped_after_retries(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(handler, max_attempts=3)
        with pytest.raises(TransportError) as exc_info:
            await transport.execute(build_request("GET", URL))

        assert len(calls) == 3
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_close_only_owned_client(self):
        borrowed = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        transport = HttpTransport(HttpSettings(), client=borrowed)
        await transport.close()
        assert not borrowed.is_closed
        await borrowed.aclose()

        owned = HttpTransport(HttpSettings())
        await owned.close()
        assert owned._client.is_closed


class TestIsRetryable:
    def test_classification(self):
        assert is_retryable_error(httpx.ReadTimeout("slow")) is True
        assert is_retryable_error(TransportError("boom", status_code=503)) is True
        assert is_retryable_error(TransportError("bad", status_code=400)) is False
        assert is_retryable_error(NotFoundError()) is False
        assert is_retryable_error(ValueError("x")) is False


class TestParseJson:
    def test_json_body(self):
        assert parse_json(httpx.Response(200, json={"items": []})) == {"items": []}

    def test_empty_body(self):
        assert parse_json(httpx.Response(204)) is None

    def test_invalid_json(self):
        with pytest.raises(ShapeError, match="get_licence"):
            parse_json(httpx.Response(200, content=b"<html>"), "get_licence")


class TestClose:
    @pytest.mark.asyncio
    async def test_close_error_is_logged_not_raised(self, caplog):
        transport = HttpTransport(HttpSettings())
        transport._client.aclose = AsyncMock(side_effect=RuntimeError("already gone"))

        await transport.close()

        assert "Error closing HttpTransport client" in caplog.text
