"""HTTP API for banner extraction (aiohttp)."""

import logging
from pathlib import Path

from aiohttp import web

from .core import BannerExtractor

logger = logging.getLogger(__name__)

EXTRACTOR_KEY = web.AppKey('extractor', BannerExtractor)


async def health(request: web.Request) -> web.Response:
    return web.json_response({'status': 'Server is running'})


async def extract_banner(request: web.Request) -> web.Response:
    """POST /api/extractbanner: {artistUrl, deviceProfile?} -> extraction result."""
    try:
        payload = await request.json()
    except ValueError:
        return web.json_response({'success': False, 'error': 'Request body must be JSON'}, status=400)

    if not isinstance(payload, dict) or not payload.get('artistUrl'):
        return web.json_response({'success': False, 'error': 'No artist URL provided'}, status=400)

    device_profile = payload.get('deviceProfile') or payload.get('deviceType') or 'desktop'

    try:
        result = await request.app[EXTRACTOR_KEY].submit(payload['artistUrl'], device_profile)
    except Exception as e:
        logger.error(f"Error handling extraction request: {e}")
        return web.json_response({'success': False, 'error': 'Server error while processing your request'},
                                 status=500)

    return web.json_response(result.to_dict(), status=200 if result.success else 400)


async def _drain_queue(app: web.Application) -> None:
    await app[EXTRACTOR_KEY].queue.join()


def create_app(extractor: BannerExtractor) -> web.Application:
    """Build the web application around an extractor."""
    images_dir = Path(extractor.config.images_dir)
    images_dir.mkdir(parents=True, exist_ok=True)

    app = web.Application()
    app[EXTRACTOR_KEY] = extractor
    app.router.add_get('/api/health', health)
    app.router.add_post('/api/extractbanner', extract_banner)
    app.router.add_static('/images', images_dir)
    app.on_shutdown.append(_drain_queue)
    return app


def run_server(extractor: BannerExtractor, host: str = '0.0.0.0', port: int = 5001) -> None:
    logger.info(f"Server running on port {port}")
    logger.info(f"Access the API at http://localhost:{port}/api")
    web.run_app(create_app(extractor), host=host, port=port, print=None)
