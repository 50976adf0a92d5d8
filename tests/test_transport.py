"""Tests for AiohttpTransport against a local aiohttp server."""

import json

import aiohttp
import pytest
from aiohttp import test_utils, web

from orderkit import Adapter, Config
from orderkit.adapter import INTERNAL_SERVER_ERROR, AiohttpTransport, BufferedResponse
from tests.conftest import err, ok


@pytest.fixture
def seen():
    return []


@pytest.fixture
async def server(seen):
    async def echo(request: web.Request) -> web.Response:
        seen.append(
            {
                "method": request.method,
                "path": request.path,
                "headers": dict(request.headers),
                "body": await request.text(),
            }
        )
        response = web.Response(
            status=201,
            reason="Created",
            text=json.dumps({"name": "café"}, ensure_ascii=False),
            content_type="application/json",
            charset="latin-1",
        )
        response.set_cookie("session", "abc")
        return response

    async def empty(request: web.Request) -> web.Response:
        return web.Response(status=204)

    async def broken(request: web.Request) -> web.Response:
        return web.Response(status=500, text="<html>oops</html>")

    app = web.Application()
    app.router.add_route("*", "/empty", empty)
    app.router.add_route("*", "/broken", broken)
    app.router.add_route("*", "/{tail:.*}", echo)

    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
async def transport():
    transport = AiohttpTransport()
    yield transport
    await transport.close()


class TestSend:
    async def test_status_reason_and_charset(self, server, transport):
        response = await transport.send("GET", str(server.make_url("/menus/19")), {}, None)

        assert isinstance(response, BufferedResponse)
        assert response.status == 201
        assert response.status_text == "Created"
        assert response.encoding == "latin-1"
        assert json.loads(await response.text()) == {"name": "café"}

    async def test_headers_and_body_are_sent(self, server, seen, transport):
        headers = {"Api-Key": "k", "Content-Type": "application/json", "Customer-Token": "opaque"}

        await transport.send("POST", str(server.make_url("/orders/validate")), headers, '{"a": 1}')

        [request] = seen
        assert request["method"] == "POST"
        assert request["path"] == "/orders/validate"
        assert request["headers"]["Api-Key"] == "k"
        assert request["headers"]["Customer-Token"] == "opaque"
        assert request["body"] == '{"a": 1}'

    async def test_cookies_are_not_sent_back(self, server, seen, transport):
        url = str(server.make_url("/customers/me"))
        await transport.send("GET", url, {}, None)
        await transport.send("GET", url, {}, None)

        assert len(seen) == 2
        assert "Cookie" not in seen[1]["headers"]

    async def test_no_content(self, server, transport):
        response = await transport.send("DELETE", str(server.make_url("/empty")), {}, None)
        assert response.status == 204
        assert await response.text() == ""


class TestSessionOwnership:
    async def test_injected_session_is_left_open(self, server):
        async with aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar()) as session:
            transport = AiohttpTransport(session)
            await transport.send("GET", str(server.make_url("/menus/19")), {}, None)

            await transport.close()

            assert not session.closed

    async def test_owned_session_is_closed(self, server, transport):
        await transport.send("GET", str(server.make_url("/menus/19")), {}, None)
        session = transport._session

        await transport.close()

        assert session.closed

    async def test_session_recreated_after_close(self, server, transport):
        url = str(server.make_url("/menus/19"))
        await transport.send("GET", url, {}, None)
        first = transport._session
        await transport.close()

        response = await transport.send("GET", url, {}, None)

        assert response.status == 201
        assert transport._session is not first
        assert not transport._session.closed

    async def test_close_without_send(self):
        await AiohttpTransport().close()


class TestAdapterOverHttp:
    @pytest.fixture
    def config(self, server):
        return Config(api_key="live-key", api_base=str(server.make_url("/")))

    async def test_request_round_trip(self, config, seen):
        async with Adapter(config) as adapter:
            body = ok(await adapter.request("POST", "orders/validate", {"cart": []}))

        assert body == {"name": "café"}
        [request] = seen
        assert request["path"] == "/orders/validate"
        assert request["headers"]["Api-Key"] == "live-key"
        assert json.loads(request["body"]) == {"cart": []}

    async def test_no_content_is_true(self, config):
        async with Adapter(config) as adapter:
            assert ok(await adapter.request("DELETE", "empty")) is True

    async def test_server_error(self, config):
        async with Adapter(config) as adapter:
            assert err(await adapter.request("GET", "broken")) == INTERNAL_SERVER_ERROR
