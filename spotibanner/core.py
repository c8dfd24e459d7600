"""End-to-end banner extraction for Spotify artist pages.

This module ties URL normalization, the banner locator, the downloader and the
dispatch queue together behind a single ``url -> ExtractionResult`` interface.
"""

import logging
from typing import Optional, Union

from .browser import BrowserManager
from .dataclasses import (
    BannerConfig,
    DeviceProfile,
    ErrorKind,
    ExtractionFailure,
    ExtractionRequest,
    ExtractionResult,
    ExtractionSuccess,
    NormalizedArtistRef,
)
from .dispatch import DispatchQueue
from .downloader import BannerDownloader
from .errors import BannerError, DownloadFailedError, ExtractionError, InvalidUrlError, NoBannerFoundError
from .locator import BannerLocator
from .urls import normalize_cdn_url


class BannerExtractor:
    """Standalone banner extractor for use by the CLI, the web server or other code."""

    def __init__(self, config: Optional[BannerConfig] = None,
                 browser_manager: Optional[BrowserManager] = None,
                 locator: Optional[BannerLocator] = None,
                 downloader: Optional[BannerDownloader] = None) -> None:
        self.config = config or BannerConfig()  # Use defaults if no config provided
        self.logger = logging.getLogger(__name__)

        self.browser_manager = browser_manager or BrowserManager(self.config)
        self.locator = locator or BannerLocator(self.config.min_image_size)
        self.downloader = downloader or BannerDownloader(self.config, self.browser_manager)
        self.queue = DispatchQueue(self._run_request, self.config.cooldown_seconds)

    async def submit(self, artist_url: str,
                     device_profile: Union[DeviceProfile, str] = DeviceProfile.DESKTOP) -> ExtractionResult:
        """Validate a URL and run its extraction through the rate-limited queue.

        Invalid URLs fail immediately and never occupy a queue slot.
        """
        try:
            profile = DeviceProfile.parse(device_profile)
        except ValueError as e:
            return ExtractionFailure(ErrorKind.INVALID_URL, str(e))

        if NormalizedArtistRef.from_url(artist_url) is None:
            return InvalidUrlError().to_result()

        self.logger.info(f"Processing request for artist URL: {artist_url} ({profile.value})")
        return await self.queue.submit(ExtractionRequest(artist_url, profile))

    async def _run_request(self, request: ExtractionRequest) -> ExtractionResult:
        return await self.process(request.raw_artist_url, request.device_profile)

    async def process(self, artist_url: str,
                      device_profile: Union[DeviceProfile, str] = DeviceProfile.DESKTOP) -> ExtractionResult:
        """Extract and download the banner for one artist page.

        Args:
            artist_url: Any supported Spotify artist reference
            device_profile: 'desktop' or 'mobile'

        Returns:
            ExtractionSuccess, or ExtractionFailure describing what went wrong
        """
        try:
            profile = DeviceProfile.parse(device_profile)

            artist = NormalizedArtistRef.from_url(artist_url)
            if artist is None:
                raise InvalidUrlError()

            banner_url = await self.locate_banner(artist.canonical_url, profile)
            if not banner_url:
                raise NoBannerFoundError()

            filename = await self.downloader.download(banner_url, artist.artist_id, profile)
            if not filename:
                raise DownloadFailedError()

            return ExtractionSuccess(
                artist_url=artist.canonical_url,
                banner_url=normalize_cdn_url(banner_url, self.config.download_width),
                image_path=f"/images/{filename}",
                artist_id=artist.artist_id,
                device_profile=profile,
            )

        except BannerError as e:
            self.logger.warning(f"Extraction failed for {artist_url}: {e}")
            return e.to_result()
        except Exception as e:
            self.logger.error(f"Error processing artist URL {artist_url}: {e}")
            return ExtractionFailure(ErrorKind.PROCESSING_ERROR, f"An unexpected error occurred: {e}")

    async def locate_banner(self, canonical_url: str, device_profile: DeviceProfile) -> Optional[str]:
        """Render the artist page and run the locator against it.

        Raises:
            ExtractionError: if anything goes wrong while driving the browser
        """
        self.logger.info(f"Starting extraction for: {canonical_url} ({device_profile.value} version)")
        try:
            async with self.browser_manager.render(canonical_url, device_profile) as page:
                return await self.locator.locate(page, device_profile)
        except Exception as e:
            self.logger.error(f"Error extracting banner: {e}")
            raise ExtractionError(f"Error extracting banner: {e}") from e
