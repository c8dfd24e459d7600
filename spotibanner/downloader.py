"""Banner image downloading through a browser session."""

import logging
from pathlib import Path
from typing import Optional

from .browser import BrowserManager
from .dataclasses import BannerConfig, DeviceProfile
from .urls import build_image_filename, extension_for_content_type, normalize_cdn_url


class BannerDownloader:
    """Fetches a located banner and saves it under a per-artist filename."""

    def __init__(self, config: BannerConfig, browser_manager: BrowserManager) -> None:
        self.config = config
        self.browser_manager = browser_manager
        self.images_dir = Path(config.images_dir)
        self.logger = logging.getLogger(__name__)

    def ensure_images_dir(self) -> Path:
        self.images_dir.mkdir(parents=True, exist_ok=True)
        return self.images_dir

    async def download(self, image_url: str, artist_id: str,
                       device_profile: DeviceProfile = DeviceProfile.DESKTOP) -> Optional[str]:
        """Download the banner image.

        Args:
            image_url: Banner URL as located on the page
            artist_id: Artist id used as the filename stem
            device_profile: Profile the banner was located for

        Returns:
            Filename inside the images directory, or None if the download failed
        """
        device_profile = DeviceProfile.parse(device_profile)
        target_url = normalize_cdn_url(image_url, self.config.download_width)

        try:
            images_dir = self.ensure_images_dir()

            async with self.browser_manager.open_page(device_profile) as page:
                await page.set_extra_http_headers({'Accept': self.config.image_accept_header})

                self.logger.info(f"Downloading image from: {target_url}")
                response = await page.goto(target_url, timeout=self.config.page_timeout)

                if response is None:
                    self.logger.error(f"No response received for {target_url}")
                    return None
                if response.status >= 400:
                    self.logger.error(f"Image request failed with status {response.status}")
                    return None

                body = await response.body()
                content_type = response.headers.get('content-type', '')

            extension = extension_for_content_type(content_type)
            filename = build_image_filename(artist_id, device_profile, extension)
            file_path = images_dir / filename
            file_path.write_bytes(body)

            self.logger.info(f"Banner saved to: {file_path} ({content_type or 'unknown content type'})")
            return filename

        except Exception as e:
            self.logger.error(f"Error downloading banner image: {e}")
            return None
