import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer as HTTPTestServer

from downpour.builder import build_request
from downpour.core import RequestDownpour
from downpour.errors import TransportError
from downpour.models import EndpointConfig, RequestTemplate
from downpour.transport import AiohttpTransport


async def ok(request):
    resp = web.Response(text="hello", status=200)
    resp.headers.add("X-Multi", "a")
    resp.headers.add("X-Multi", "b")
    return resp


async def echo(request):
    body = await request.text()
    return web.json_response(
        {
            "method": request.method,
            "body": body,
            "x_test": request.headers.get("X-Test"),
        },
        status=201,
    )


async def slow(request):
    await asyncio.sleep(1.0)
    return web.Response(text="late")


async def teapot(request):
    return web.Response(text="short and stout", status=418)


@pytest_asyncio.fixture
async def base_url():
    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_route("*", "/echo", echo)
    app.router.add_get("/slow", slow)
    app.router.add_get("/teapot", teapot)
    async with HTTPTestServer(app) as server:
        yield f"http://{server.host}:{server.port}"


@pytest.mark.asyncio
async def test_get_collects_repeated_headers(base_url):
    config = EndpointConfig(base_url, timeout_s=5)
    async with AiohttpTransport() as transport:
        resp = await transport.send(build_request(RequestTemplate(endpoint="/ok"), config))
    assert resp.status == 200
    assert resp.body == "hello"
    assert resp.headers["X-Multi"] == ["a", "b"]


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
async def test_body_methods_send_body(base_url, method):
    config = EndpointConfig(base_url, timeout_s=5, default_headers={"X-Test": "default"})
    template = RequestTemplate(
        endpoint="/echo", method=method, headers={"X-Test": "override"}, body='{"k": 1}'
    )
    async with AiohttpTransport() as transport:
        resp = await transport.send(build_request(template, config))
    assert resp.status == 201
    assert f'"method": "{method}"' in resp.body
    assert '"body": "{\\"k\\": 1}"' in resp.body
    assert '"x_test": "override"' in resp.body


@pytest.mark.asyncio
async def test_delete_sends_no_body(base_url):
    config = EndpointConfig(base_url, timeout_s=5)
    template = RequestTemplate(endpoint="/echo", method="DELETE", body="dropped")
    async with AiohttpTransport() as transport:
        resp = await transport.send(build_request(template, config))
    assert '"method": "DELETE"' in resp.body
    assert '"body": ""' in resp.body


@pytest.mark.asyncio
async def test_timeout_becomes_transport_error(base_url):
    config = EndpointConfig(base_url, timeout_s=0.1)
    async with AiohttpTransport() as transport:
        with pytest.raises(TransportError) as exc_info:
            await transport.send(build_request(RequestTemplate(endpoint="/slow"), config))
    assert "timed out" in exc_info.value.cause


@pytest.mark.asyncio
async def test_connection_refused_becomes_transport_error(unused_tcp_port):
    config = EndpointConfig(f"http://127.0.0.1:{unused_tcp_port}", timeout_s=2)
    async with AiohttpTransport() as transport:
        with pytest.raises(TransportError):
            await transport.send(build_request(RequestTemplate(), config))


@pytest.mark.asyncio
async def test_send_outside_context_is_a_programming_error():
    transport = AiohttpTransport()
    config = EndpointConfig("http://127.0.0.1:1")
    with pytest.raises(RuntimeError):
        await transport.send(build_request(RequestTemplate(), config))


@pytest.mark.asyncio
async def test_downpour_opens_its_own_session(base_url):
    config = EndpointConfig(base_url, concurrency=5, max_retries=0, timeout_s=5)
    outcomes, stats = await RequestDownpour(config, use_progress_bar=False).run_with_stats(
        RequestTemplate(endpoint="/teapot")
    )
    assert len(outcomes) == 5
    assert all(o.status == 418 for o in outcomes)
    assert all(o.body == "short and stout" for o in outcomes)
    assert stats.failed == 5
    assert stats.status_counts == {418: 5}


@pytest.mark.asyncio
async def test_downpour_against_closed_port_yields_terminal_failures(unused_tcp_port):
    config = EndpointConfig(
        f"http://127.0.0.1:{unused_tcp_port}", concurrency=3, max_retries=1, timeout_s=2
    )
    outcomes = await RequestDownpour(config, use_progress_bar=False).run(RequestTemplate())
    assert len(outcomes) == 3
    assert all(o.status == -1 and o.retry_count == 1 for o in outcomes)
    assert all(o.body.startswith("Error: ") for o in outcomes)
