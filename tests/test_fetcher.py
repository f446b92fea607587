# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio
import pickle

import pytest
from aiohttp import ClientSession, web

import site_harvest.crawler.fetcher as fetcher_module
from site_harvest.config import BROWSER_ACCEPT, CrawlerConfig
from site_harvest.crawler.errors import (
    CrawlError,
    FetchError,
    FetchErrorKind,
    classify_exception,
    classify_status,
)
from site_harvest.crawler.fetcher import PageFetcher


@pytest.fixture()
def pauses(monkeypatch) -> list[float]:
    """Record every delay instead of sleeping."""
    recorded: list[float] = []

    async def fake_pause(seconds: float) -> None:
        recorded.append(seconds)

    monkeypatch.setattr(fetcher_module, "_pause", fake_pause)
    return recorded


def _sequence_app(statuses: list[int], seen: list[dict[str, str]]) -> web.Application:
    """Answer successive requests with *statuses*, recording request headers."""
    remaining = list(statuses)

    async def handler(request: web.Request) -> web.Response:
        seen.append(dict(request.headers))
        status = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return web.Response(text=f"<html><body>status {status}</body></html>", status=status, content_type="text/html")

    app = web.Application()
    app.router.add_get("/", handler)
    return app


@pytest.mark.asyncio()
async def test_fetch_success_sends_browser_headers(serve, fast_config, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([200], seen))
    async with ClientSession() as session:
        page = await PageFetcher(session, fast_config).fetch(f"{base}/")
    assert page.status == 200
    assert "status 200" in page.content
    assert len(seen) == 1
    assert seen[0]["User-Agent"] == fast_config.user_agent
    assert seen[0]["Accept"] == BROWSER_ACCEPT


@pytest.mark.asyncio()
async def test_politeness_delay_within_bounds(serve, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([200], seen))
    cfg = CrawlerConfig(courtesy_delay=0)
    async with ClientSession() as session:
        await PageFetcher(session, cfg).fetch(f"{base}/")
    assert len(pauses) == 1
    assert 2 <= pauses[0] <= 5


@pytest.mark.asyncio()
async def test_rate_limited_then_success(serve, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([429, 200], seen))
    cfg = CrawlerConfig(politeness_delay_min=0, politeness_delay_max=0)
    async with ClientSession() as session:
        page = await PageFetcher(session, cfg).fetch(f"{base}/")
    assert page.status == 200
    assert len(seen) == 2
    # retry keeps the browser headers
    assert seen[1]["User-Agent"] == cfg.user_agent
    backoffs = [p for p in pauses if p > 0]
    assert len(backoffs) == 1
    assert 10 <= backoffs[0] <= 25


@pytest.mark.asyncio()
async def test_rate_limited_twice_gives_up(serve, fast_config, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([429, 429, 200], seen))
    async with ClientSession() as session:
        with pytest.raises(FetchError) as info:
            await PageFetcher(session, fast_config).fetch(f"{base}/")
    assert info.value.kind is FetchErrorKind.RATE_LIMITED
    assert info.value.status == 429
    assert len(seen) == 2


@pytest.mark.asyncio()
async def test_forbidden_retries_without_custom_headers(serve, fast_config, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([403, 200], seen))
    async with ClientSession() as session:
        page = await PageFetcher(session, fast_config).fetch(f"{base}/")
    assert page.status == 200
    assert len(seen) == 2
    assert seen[1].get("User-Agent") != fast_config.user_agent
    assert seen[1].get("Accept") != BROWSER_ACCEPT


@pytest.mark.asyncio()
async def test_bad_request_twice_is_unclassified(serve, fast_config, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([400, 400], seen))
    async with ClientSession() as session:
        with pytest.raises(FetchError) as info:
            await PageFetcher(session, fast_config).fetch(f"{base}/")
    assert info.value.kind is FetchErrorKind.UNCLASSIFIED_HTTP
    assert len(seen) == 2


@pytest.mark.asyncio()
async def test_not_found_message_embeds_url(serve, fast_config, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([404], seen))
    url = f"{base}/"
    async with ClientSession() as session:
        with pytest.raises(FetchError) as info:
            await PageFetcher(session, fast_config).fetch(url)
    assert info.value.kind is FetchErrorKind.NOT_FOUND
    assert url in str(info.value)
    assert "404" in str(info.value)
    assert len(seen) == 1


@pytest.mark.asyncio()
async def test_server_error(serve, fast_config, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([503], seen))
    async with ClientSession() as session:
        with pytest.raises(FetchError) as info:
            await PageFetcher(session, fast_config).fetch(f"{base}/")
    assert info.value.kind is FetchErrorKind.SERVER_ERROR


@pytest.mark.asyncio()
async def test_invalid_scheme_fails_before_any_delay(fast_config, pauses):
    async with ClientSession() as session:
        with pytest.raises(FetchError) as info:
            await PageFetcher(session, fast_config).fetch("ftp://example.com/file")
    assert info.value.kind is FetchErrorKind.INVALID_URL
    assert pauses == []


@pytest.mark.asyncio()
async def test_connection_refused(unused_tcp_port, fast_config, pauses):
    url = f"http://127.0.0.1:{unused_tcp_port}/"
    async with ClientSession() as session:
        with pytest.raises(FetchError) as info:
            await PageFetcher(session, fast_config).fetch(url)
    assert info.value.kind is FetchErrorKind.CONNECTION_REFUSED
    assert url in str(info.value)


@pytest.mark.asyncio()
async def test_timeout(serve, pauses):
    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1.5)
        return web.Response(text="late")

    app = web.Application()
    app.router.add_get("/", slow)
    base = await serve(app)
    cfg = CrawlerConfig(request_timeout=0.3, politeness_delay_min=0, politeness_delay_max=0)
    async with ClientSession() as session:
        with pytest.raises(FetchError) as info:
            await PageFetcher(session, cfg).fetch(f"{base}/")
    assert info.value.kind is FetchErrorKind.TIMEOUT


@pytest.mark.asyncio()
async def test_fetch_resource_requires_200(serve, fast_config, pauses):
    seen: list[dict[str, str]] = []
    base = await serve(_sequence_app([202], seen))
    async with ClientSession() as session:
        with pytest.raises(FetchError):
            await PageFetcher(session, fast_config).fetch_resource(f"{base}/")
    assert seen[0]["User-Agent"] == fast_config.resource_user_agent
    assert pauses == []


@pytest.mark.parametrize(
    "status,kind",
    [
        (404, FetchErrorKind.NOT_FOUND),
        (403, FetchErrorKind.FORBIDDEN),
        (429, FetchErrorKind.RATE_LIMITED),
        (500, FetchErrorKind.SERVER_ERROR),
        (599, FetchErrorKind.SERVER_ERROR),
        (410, FetchErrorKind.UNCLASSIFIED_HTTP),
        (400, FetchErrorKind.UNCLASSIFIED_HTTP),
    ],
)
def test_classify_status(status, kind):
    assert classify_status(status) is kind


def test_classify_timeout_exception():
    assert classify_exception(asyncio.TimeoutError()) is FetchErrorKind.TIMEOUT


def test_errors_survive_pickling_and_wrapping():
    err = FetchError(FetchErrorKind.FORBIDDEN, "https://example.com/", status=403)
    clone = pickle.loads(pickle.dumps(err))
    assert clone.kind is FetchErrorKind.FORBIDDEN
    assert str(clone) == str(err)

    crawl_error = CrawlError.from_fetch_error(err)
    assert crawl_error.kind is FetchErrorKind.FORBIDDEN
    assert str(crawl_error) == str(err)
    assert crawl_error.__cause__ is err
