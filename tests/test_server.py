"""Tests for the aiohttp API."""

import pytest
from aiohttp import test_utils

from spotibanner.core import BannerExtractor
from spotibanner.server import create_app

from conftest import ARTIST_ID, ARTIST_URL, FakeBrowserManager, FakeDownloadPage, FakeResponse


@pytest.fixture
def extractor(banner_config, banner_page):
    manager = FakeBrowserManager(
        rendered_page=banner_page,
        download_page=FakeDownloadPage(FakeResponse(body=b"webp-bytes", content_type="image/webp")),
    )
    return BannerExtractor(banner_config, browser_manager=manager)


class TestBannerAPI:
    """Test suite for the HTTP endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, extractor):
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.get('/api/health')
            assert response.status == 200
            assert await response.json() == {'status': 'Server is running'}

    @pytest.mark.asyncio
    async def test_extract_and_serve_image(self, extractor):
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.post('/api/extractbanner', json={'artistUrl': ARTIST_URL})
            assert response.status == 200

            payload = await response.json()
            assert payload['success'] is True
            assert payload['data']['artistId'] == ARTIST_ID
            assert payload['data']['deviceProfile'] == 'desktop'
            assert payload['data']['imagePath'] == f"/images/{ARTIST_ID}_desktop_banner.webp"

            image = await client.get(payload['data']['imagePath'])
            assert image.status == 200
            assert await image.read() == b"webp-bytes"

    @pytest.mark.asyncio
    async def test_device_type_alias(self, extractor):
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.post('/api/extractbanner',
                                         json={'artistUrl': ARTIST_URL, 'deviceType': 'mobile'})
            payload = await response.json()
            assert payload['data']['deviceProfile'] == 'mobile'

    @pytest.mark.asyncio
    async def test_missing_url(self, extractor):
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.post('/api/extractbanner', json={})
            assert response.status == 400
            assert await response.json() == {'success': False, 'error': 'No artist URL provided'}

    @pytest.mark.asyncio
    async def test_body_not_json(self, extractor):
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.post('/api/extractbanner', data='artistUrl=x',
                                         headers={'Content-Type': 'text/plain'})
            assert response.status == 400

    @pytest.mark.asyncio
    async def test_invalid_url_is_bad_request(self, extractor):
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.post('/api/extractbanner', json={'artistUrl': 'https://example.com/artist/x'})
            assert response.status == 400
            assert await response.json() == {'success': False, 'error': 'Invalid Spotify artist URL'}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_server_error(self, extractor):
        async def broken_submit(*args):
            raise RuntimeError("queue exploded")

        extractor.submit = broken_submit
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.post('/api/extractbanner', json={'artistUrl': ARTIST_URL})
            assert response.status == 500
            assert (await response.json())['success'] is False

    @pytest.mark.asyncio
    async def test_non_string_url_is_bad_request(self, extractor):
        async with test_utils.TestClient(test_utils.TestServer(create_app(extractor))) as client:
            response = await client.post('/api/extractbanner', json={'artistUrl': 12345})
            assert response.status == 400
            assert await response.json() == {'success': False, 'error': 'Invalid Spotify artist URL'}
