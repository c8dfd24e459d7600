"""Pytest configuration and fixtures for banner extraction tests."""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import pytest

from spotibanner.dataclasses import BannerConfig
from spotibanner.locator import (
    BACKGROUND_CONTAINER_JS,
    BACKGROUND_SWEEP_JS,
    ENTITY_IMAGE_JS,
    IMAGES_SNAPSHOT_JS,
)

ARTIST_ID = "1McMsnEElThX1knmY4oliG"
ARTIST_URL = f"https://open.spotify.com/artist/{ARTIST_ID}"
BANNER_URL = "https://image-cdn-ak.spotifycdn.com/image/ab67618600000194d2e8a3bce1c0d81c6c8f6a4b"


class FakeRenderedPage:
    """RenderedPage that answers locator snapshot scripts from canned DOM data."""

    def __init__(self, images: Optional[List[Dict[str, Any]]] = None,
                 background: Optional[str] = None,
                 entity: Optional[Dict[str, Any]] = None,
                 backgrounds: Optional[List[str]] = None,
                 error: Optional[Exception] = None) -> None:
        self.images = images or []
        self.background = background
        self.entity = entity
        self.backgrounds = backgrounds or []
        self.error = error
        self.scripts: List[str] = []

    async def wait_for_load(self) -> None:
        pass

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.scripts.append(script)
        if self.error:
            raise self.error
        if script == IMAGES_SNAPSHOT_JS:
            return self.images
        if script == BACKGROUND_CONTAINER_JS:
            return self.background
        if script == ENTITY_IMAGE_JS:
            return self.entity
        if script == BACKGROUND_SWEEP_JS:
            return self.backgrounds
        raise AssertionError(f"Unexpected script: {script}")


class FakeResponse:
    def __init__(self, body: bytes = b"image-bytes", content_type: str = "image/jpeg", status: int = 200) -> None:
        self.status = status
        self.headers = {'content-type': content_type} if content_type else {}
        self._body = body

    async def body(self) -> bytes:
        return self._body


class FakeDownloadPage:
    """Playwright page stand-in used by the downloader."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.headers: Dict[str, str] = {}
        self.visited: List[str] = []

    async def set_extra_http_headers(self, headers: Dict[str, str]) -> None:
        self.headers.update(headers)

    async def goto(self, url: str, **kwargs) -> Optional[FakeResponse]:
        self.visited.append(url)
        if self.error:
            raise self.error
        return self.response


class FakeBrowserManager:
    """BrowserManager stand-in that records session lifecycles."""

    def __init__(self, rendered_page: Optional[FakeRenderedPage] = None,
                 download_page: Optional[FakeDownloadPage] = None,
                 render_error: Optional[Exception] = None) -> None:
        self.rendered_page = rendered_page or FakeRenderedPage()
        self.download_page = download_page or FakeDownloadPage(FakeResponse())
        self.render_error = render_error
        self.rendered_urls: List[str] = []
        self.opened = 0
        self.closed = 0
        self.render_started: List[float] = []
        self.session_closed: List[float] = []

    @asynccontextmanager
    async def render(self, url, device_profile):
        self.opened += 1
        self.render_started.append(time.monotonic())
        self.rendered_urls.append(url)
        try:
            if self.render_error:
                raise self.render_error
            yield self.rendered_page
        finally:
            self.closed += 1
            self.session_closed.append(time.monotonic())

    @asynccontextmanager
    async def open_page(self, device_profile):
        self.opened += 1
        try:
            yield self.download_page
        finally:
            self.closed += 1
            self.session_closed.append(time.monotonic())


@pytest.fixture
def images_dir(tmp_path):
    return tmp_path / "images"


@pytest.fixture
def banner_config(images_dir):
    """Config with no waiting, for fast tests."""
    return BannerConfig(
        images_dir=str(images_dir),
        cooldown_seconds=0.0,
        settle_delay=0.0,
    )


@pytest.fixture
def banner_page():
    """Rendered desktop artist page with a background-image banner."""
    return FakeRenderedPage(background=f'url("{BANNER_URL}")')


@pytest.fixture
def empty_page():
    """Rendered page with nothing that looks like a banner."""
    return FakeRenderedPage(
        images=[
            {'src': 'https://i.scdn.co/image/avatar', 'srcset': '', 'width': 64, 'height': 64},
            {'src': 'https://i.scdn.co/image/cover', 'srcset': '', 'width': 180, 'height': 180},
        ],
        background=None,
        entity=None,
        backgrounds=['url("https://open.spotifycdn.com/cdn/images/noise.png")'],
    )
