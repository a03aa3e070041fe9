"""Shared fixtures: an in-memory stand-in for the stealth HTTP session."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from page_zipper import RequestContext, ScraperConfig


PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32
GIF_BYTES = b'GIF89a' + b'\x01' * 16


@dataclass
class FakeResponse:
    status_code: int = 200
    content: bytes = b''
    headers: dict = field(default_factory=dict)
    url: str | None = None
    delay: float = 0.0

    @property
    def text(self) -> str:
        return self.content.decode('utf-8', errors='replace')


class FakeSession:
    """
    Maps URLs to FakeResponse objects or exceptions to raise.

    Unknown URLs raise ConnectionError, like an unreachable host.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, dict]] = []

    def add(self, url: str, response) -> None:
        self.routes[url] = response

    async def get(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        await asyncio.sleep(0)
        route = self.routes.get(url)
        if route is None:
            raise ConnectionError(f'Could not resolve host for {url}')
        if isinstance(route, BaseException):
            raise route
        await asyncio.sleep(route.delay)
        if route.url is None:
            route.url = url
        return route

    @property
    def requested_urls(self) -> list[str]:
        return [url for url, _ in self.calls]


def html_response(html: str, url: str | None = None, status_code: int = 200) -> FakeResponse:
    return FakeResponse(
        status_code=status_code,
        content=html.encode('utf-8'),
        headers={'content-type': 'text/html; charset=utf-8'},
        url=url,
    )


def image_response(content: bytes = PNG_BYTES, content_type: str | None = 'image/png') -> FakeResponse:
    headers = {'content-type': content_type} if content_type else {}
    return FakeResponse(status_code=200, content=content, headers=headers)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def scraper_config(tmp_path) -> ScraperConfig:
    return ScraperConfig(workspace_root=tmp_path / 'workspaces')


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(request_id='1700000000000_deadbeef')
