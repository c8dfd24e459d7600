"""Spotify artist banner extraction."""

__version__ = "1.0.0"

# Core standalone functionality
from .dataclasses import (
    BannerCandidate,
    BannerConfig,
    DeviceProfile,
    ErrorKind,
    ExtractionFailure,
    ExtractionRequest,
    ExtractionSuccess,
    NormalizedArtistRef,
)
from .core import BannerExtractor
from .urls import (
    extension_for_content_type,
    extract_artist_id,
    normalize_artist_url,
    normalize_cdn_url,
)

# Internal components (for advanced usage)
from .browser import BrowserManager, PlaywrightRenderedPage, RenderedPage
from .locator import BannerLocator
from .downloader import BannerDownloader
from .dispatch import DispatchQueue

__all__ = [
    # Version
    '__version__',

    # Core API
    'BannerExtractor',
    'BannerConfig',
    'DeviceProfile',
    'ErrorKind',
    'ExtractionRequest',
    'ExtractionSuccess',
    'ExtractionFailure',
    'NormalizedArtistRef',
    'BannerCandidate',

    # URL helpers
    'normalize_artist_url',
    'extract_artist_id',
    'normalize_cdn_url',
    'extension_for_content_type',

    # Internal components (for advanced usage)
    'BrowserManager',
    'PlaywrightRenderedPage',
    'RenderedPage',
    'BannerLocator',
    'BannerDownloader',
    'DispatchQueue',
]
