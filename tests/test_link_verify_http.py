import asyncio

import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer

from linkaudit.workflows.checker import check_links
from linkaudit.workflows.checker_config import CheckConfig
from linkaudit.workflows.link_verify import LinkVerifier, Success, TerminalFailure, TransientFailure


async def _ok(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def _moved(request: web.Request) -> web.Response:
    raise web.HTTPFound("/ok")


async def _loop(request: web.Request) -> web.Response:
    raise web.HTTPFound("/loop")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(0.5)
    return web.Response(text="late")


async def _slow_head_then_get(request: web.Request) -> web.Response:
    await asyncio.sleep(0.15)
    if request.method == "HEAD":
        return web.Response(status=405)
    return web.Response(text="ok")


async def _hops(request: web.Request) -> web.Response:
    remaining = int(request.match_info["remaining"])
    if remaining > 0:
        raise web.HTTPFound(f"/hops/{remaining - 1}")
    return web.Response(text="arrived")


def _make_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/ok", _ok)
    app.router.add_get("/moved", _moved)
    app.router.add_get("/loop", _loop)
    app.router.add_get("/slow", _slow)
    app.router.add_get("/get-only", _ok, allow_head=False)
    app.router.add_route("*", "/slow-head", _slow_head_then_get)
    app.router.add_get("/hops/{remaining}", _hops)
    return app


def _verify(path: str, config: CheckConfig):
    async def _run():
        async with TestServer(_make_app()) as server:
            async with aiohttp.ClientSession() as session:
                verifier = LinkVerifier(config, session=session)
                verification = await verifier.verify(str(server.make_url(path)))
                return verification, str(server.make_url("/ok")), str(server.make_url(path))

    return asyncio.run(_run())


def test_reachable_url_reports_itself():
    verification, _, requested = _verify("/ok", CheckConfig())
    assert verification.outcome == Success(requested)
    assert verification.attempts == 1


def test_redirect_reports_final_url():
    verification, final, _ = _verify("/moved", CheckConfig())
    assert verification.outcome == Success(final)


def test_not_found_is_terminal():
    verification, _, _ = _verify("/missing", CheckConfig(max_retries=2))
    assert verification.outcome == TerminalFailure("http_404")
    assert verification.attempts == 1


def test_head_rejected_falls_back_to_get():
    verification, _, requested = _verify("/get-only", CheckConfig())
    assert verification.outcome == Success(requested)


def test_zero_redirects_reports_location_without_following():
    verification, final, _ = _verify("/moved", CheckConfig(max_redirects=0))
    assert verification.outcome == Success(final)


def test_redirect_loop_is_terminal():
    verification, _, _ = _verify("/loop", CheckConfig(max_redirects=2))
    assert verification.outcome == TerminalFailure("too_many_redirects")
    assert verification.attempts == 1


def test_timeout_is_transient_and_retried():
    config = CheckConfig(timeout_ms=100, max_retries=1, retry_backoff_ms=0)
    verification, _, _ = _verify("/slow", config)
    assert verification.outcome == TransientFailure("timeout")
    assert verification.attempts == 2


def test_check_links_against_live_server():
    async def _run():
        async with TestServer(_make_app()) as server:
            urls = [str(server.make_url(path)) for path in ("/ok", "/moved", "/missing")]
            config = CheckConfig(batch_size=2, batch_delay_ms=0, max_retries=0)
            return urls, await check_links(urls, config)

    urls, report = asyncio.run(_run())

    assert report.ok == (urls[0],)
    assert [entry.original for entry in report.redirected] == [urls[1]]
    assert [(entry.url, entry.reason) for entry in report.error] == [(urls[2], "http_404")]


def test_get_fallback_shares_the_attempt_deadline():
    config = CheckConfig(timeout_ms=200, max_retries=0)
    verification, _, _ = _verify("/slow-head", config)

    assert verification.outcome == TransientFailure("timeout")
    assert verification.attempts == 1


def test_exactly_max_redirects_hops_succeeds():
    verification, _, _ = _verify("/hops/3", CheckConfig(max_redirects=3))
    assert isinstance(verification.outcome, Success)
    assert verification.outcome.final_url.endswith("/hops/0")


def test_one_hop_over_the_limit_fails():
    verification, _, _ = _verify("/hops/4", CheckConfig(max_redirects=3, max_retries=2))
    assert verification.outcome == TerminalFailure("too_many_redirects")
    assert verification.attempts == 1
