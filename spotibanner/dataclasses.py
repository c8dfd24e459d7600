"""Configuration, request and result types shared across the extraction pipeline."""

import asyncio
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class DeviceProfile(str, Enum):
    """Rendering context used when loading an artist page."""
    DESKTOP = 'desktop'
    MOBILE = 'mobile'

    @classmethod
    def parse(cls, value: Union['DeviceProfile', str, None]) -> 'DeviceProfile':
        """Coerce user input into a profile; None means desktop."""
        if isinstance(value, cls):
            return value
        if value is None or value == '':
            return cls.DESKTOP
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown device profile: {value!r}") from None


class ErrorKind(str, Enum):
    INVALID_URL = 'invalid-url'
    NO_BANNER_FOUND = 'no-banner-found'
    DOWNLOAD_FAILED = 'download-failed'
    EXTRACTION_ERROR = 'extraction-error'
    PROCESSING_ERROR = 'processing-error'

    @property
    def default_message(self) -> str:
        return _DEFAULT_MESSAGES[self]


_DEFAULT_MESSAGES = {
    ErrorKind.INVALID_URL: "Invalid Spotify artist URL",
    ErrorKind.NO_BANNER_FOUND: "Could not find a banner image on this artist page",
    ErrorKind.DOWNLOAD_FAILED: "Failed to download the banner image",
    ErrorKind.EXTRACTION_ERROR: "Error extracting banner from the artist page",
    ErrorKind.PROCESSING_ERROR: "An unexpected error occurred",
}


class JobState(str, Enum):
    QUEUED = 'queued'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == '':
        return default
    return value.strip().lower() not in ('0', 'false', 'no', 'off')


@dataclass(repr=True)
class BannerConfig:
    """Configuration for the banner extraction pipeline."""
    # Output
    images_dir: str = 'images'

    # Dispatch queue
    cooldown_seconds: float = 3.0  # Idle time between consecutive jobs

    # Page loading
    page_timeout: int = 30000  # Navigation timeout in milliseconds
    settle_delay: float = 2.0  # Extra seconds after load for client-side rendering
    headless: bool = True

    # Locating and downloading
    min_image_size: int = 200  # Largest-image fallback ignores anything not bigger than this
    download_width: int = 2000
    image_accept_header: str = "image/webp,image/avif,image/*;q=0.8"

    # Remote browser (browserless.io)
    browserless_token: Optional[str] = None
    browserless_endpoint: str = "wss://chrome.browserless.io"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> 'BannerConfig':
        """Create BannerConfig from environment variables, with keyword overrides on top."""
        env = os.environ if environ is None else environ
        defaults = cls()

        values: Dict[str, Any] = dict(
            images_dir=env.get('SPOTIBANNER_IMAGES_DIR') or defaults.images_dir,
            cooldown_seconds=float(env.get('SPOTIBANNER_COOLDOWN') or defaults.cooldown_seconds),
            settle_delay=float(env.get('SPOTIBANNER_SETTLE_DELAY') or defaults.settle_delay),
            page_timeout=int(env.get('SPOTIBANNER_PAGE_TIMEOUT') or defaults.page_timeout),
            headless=_env_bool(env.get('SPOTIBANNER_HEADLESS'), defaults.headless),
            browserless_token=env.get('BROWSERLESS_TOKEN') or None,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def remote_endpoint(self) -> Optional[str]:
        """Build the token-bearing CDP endpoint for the remote browser."""
        if not self.browserless_token:
            return None
        return f"{self.browserless_endpoint}?token={self.browserless_token}"

    @property
    def has_remote_browser(self) -> bool:
        return self.remote_endpoint is not None


@dataclass(frozen=True)
class ExtractionRequest:
    raw_artist_url: str
    device_profile: DeviceProfile = DeviceProfile.DESKTOP


@dataclass(frozen=True)
class NormalizedArtistRef:
    """Canonical artist page URL plus the id derived from it."""
    canonical_url: str
    artist_id: str

    @classmethod
    def from_url(cls, raw_url: Optional[str]) -> Optional['NormalizedArtistRef']:
        from .urls import extract_artist_id, normalize_artist_url

        canonical_url = normalize_artist_url(raw_url)
        if not canonical_url:
            return None
        return cls(canonical_url=canonical_url, artist_id=extract_artist_id(canonical_url))


@dataclass(frozen=True)
class BannerCandidate:
    url: str
    area_score: float = 0.0


@dataclass(frozen=True)
class ExtractionSuccess:
    artist_url: str
    banner_url: str
    image_path: str
    artist_id: str
    device_profile: DeviceProfile

    success = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': True,
            'data': {
                'artistUrl': self.artist_url,
                'bannerUrl': self.banner_url,
                'imagePath': self.image_path,
                'artistId': self.artist_id,
                'deviceProfile': self.device_profile.value,
            }
        }


@dataclass(frozen=True)
class ExtractionFailure:
    reason: ErrorKind
    message: str = ''

    success = False

    def __post_init__(self):
        if not self.message:
            object.__setattr__(self, 'message', self.reason.default_message)

    def to_dict(self) -> Dict[str, Any]:
        return {'success': False, 'error': self.message}


ExtractionResult = Union[ExtractionSuccess, ExtractionFailure]


@dataclass(repr=True)
class QueueJob:
    """A request waiting in (or running on) the dispatch queue."""
    request: ExtractionRequest
    completion: 'asyncio.Future[ExtractionResult]'
    state: JobState = JobState.QUEUED
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    result: Optional[ExtractionResult] = field(default=None, repr=False)
