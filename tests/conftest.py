# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from aiohttp import web

from site_harvest.config import CrawlerConfig

ServeFn = Callable[[web.Application], Awaitable[str]]


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """
    Config without politeness, backoff or courtesy delays.
    """
    return CrawlerConfig(
        request_timeout=5,
        politeness_delay_min=0,
        politeness_delay_max=0,
        rate_limit_backoff_min=0,
        rate_limit_backoff_max=0,
        courtesy_delay=0,
    )


@pytest_asyncio.fixture()
async def serve(unused_tcp_port_factory) -> AsyncIterator[ServeFn]:
    """
    Start aiohttp applications on free local ports; every server is cleaned up
    after the test. The returned coroutine yields the base URL of the server.
    """
    runners: list[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    try:
        yield _start
    finally:
        for runner in runners:
            await runner.cleanup()


def html_page(title: str, body: str = "", head: str = "") -> str:
    return f"<html><head><title>{title}</title>{head}</head><body>{body}</body></html>"


@pytest.fixture()
def page_html() -> Callable[..., str]:
    return html_page
