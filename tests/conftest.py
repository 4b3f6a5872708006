# File: tests/conftest.py
from __future__ import annotations

import threading
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Dict, List, Tuple
from urllib.parse import urlsplit

import pytest
import pytest_asyncio
from aiohttp import web

from threepwood.aggregator import ScanReport
from threepwood.classifier import ClassificationEngine
from threepwood.config import ScannerConfig
from threepwood.crawler.models import ElementEvent
from threepwood.origin import ScanTarget

#: path -> (body, content type[, status]) or an aiohttp handler
Routes = Dict[str, Any]


@pytest.fixture()
def target() -> ScanTarget:
    return ScanTarget.from_url("http://example.com")


@pytest.fixture()
def basic_config() -> ScannerConfig:
    """
    Return a basic valid ScannerConfig for classifier tests.
    """
    return ScannerConfig(base_url="http://example.com")


@pytest.fixture()
def report() -> ScanReport:
    return ScanReport()


@pytest.fixture()
def engine(target, report, basic_config) -> ClassificationEngine:
    return ClassificationEngine(target, report, basic_config)


class RecordingHandler:
    """Collects crawler callbacks; safe to call from worker threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.requests: List[str] = []
        self.elements: List[ElementEvent] = []
        self.responses: List[Tuple[str, str]] = []

    def on_request(self, url: str) -> None:
        with self._lock:
            self.requests.append(url)

    def on_element(self, event: ElementEvent) -> None:
        with self._lock:
            self.elements.append(event)

    def on_response(self, url: str, body: str) -> None:
        with self._lock:
            self.responses.append((url, body))

    def paths(self) -> set[str]:
        return {urlsplit(u).path for u in self.requests}


@pytest.fixture()
def handler() -> RecordingHandler:
    return RecordingHandler()


def _make_handler(body: str, content_type: str, status: int = 200):
    async def handle(_):
        return web.Response(text=body, content_type=content_type, status=status)

    return handle


@pytest_asyncio.fixture
async def serve_site(unused_tcp_port: int) -> AsyncIterator[Callable[[Routes], Awaitable[str]]]:
    """Start an aiohttp app built from a route table; yields a starter returning the base URL."""
    runners: List[web.AppRunner] = []

    async def _start(routes: Routes) -> str:
        app = web.Application()
        for path, route in routes.items():
            app.router.add_get(path, route if callable(route) else _make_handler(*route))
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", unused_tcp_port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{unused_tcp_port}"

    try:
        yield _start
    finally:
        for runner in runners:
            await runner.cleanup()


def site_config(base_url: str, **overrides) -> ScannerConfig:
    """ScannerConfig tuned for local test servers."""
    values = dict(base_url=base_url, timeout=5.0, retry_times=0, concurrency=4)
    values.update(overrides)
    return ScannerConfig(**values)


@pytest.fixture()
def make_config() -> Callable[..., ScannerConfig]:
    return site_config
