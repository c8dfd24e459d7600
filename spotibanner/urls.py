"""URL normalization utilities for Spotify artist pages and image CDN links."""

import logging
import re
import time
from typing import Optional, Union
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from .dataclasses import DeviceProfile

logger = logging.getLogger(__name__)

SPOTIFY_HOST = 'open.spotify.com'

CANONICAL_CDN_HOST = 'i.scdn.co'
ALTERNATE_CDN_HOSTS = frozenset({
    'image-cdn-ak.spotifycdn.com',
    'image-cdn-fa.spotifycdn.com',
})

IMAGE_EXTENSIONS = {
    'image/webp': 'webp',
    'image/png': 'png',
    'image/jpeg': 'jpg',
    'image/jpg': 'jpg',
    'image/avif': 'avif',
}
DEFAULT_IMAGE_EXTENSION = 'jpg'

_SPOTIFY_URI_RE = re.compile(r'^spotify:(?P<type>[a-z]+):(?P<id>[A-Za-z0-9]+)$', re.IGNORECASE)
# intl-es, intl-pt-br, es, pt-BR
_LOCALE_SEGMENT_RE = re.compile(r'^(?:intl-)?[a-z]{2}(?:[-_][a-z]{2})?$', re.IGNORECASE)
_ARTIST_ID_RE = re.compile(r'^[A-Za-z0-9]+$')


def _canonical_artist_url(artist_id: str) -> str:
    return f"https://{SPOTIFY_HOST}/artist/{artist_id}"


def normalize_artist_url(raw_url: Optional[str]) -> str:
    """Normalize any supported artist reference to its canonical page URL.

    Supported forms:
        spotify:artist:{id}
        https://open.spotify.com/artist/{id}
        https://open.spotify.com/intl-es/artist/{id}?si=...
        open.spotify.com/artist/{id}   (scheme missing)

    Returns:
        ``https://open.spotify.com/artist/{id}``, or an empty string when the
        input is not a Spotify artist reference.
    """
    if not raw_url or not isinstance(raw_url, str):
        return ""

    text = raw_url.strip()
    if not text:
        return ""

    uri_match = _SPOTIFY_URI_RE.match(text)
    if uri_match:
        if uri_match.group('type').lower() != 'artist':
            return ""
        return _canonical_artist_url(uri_match.group('id'))
    if text.lower().startswith('spotify:'):
        return ""

    if '://' not in text:
        text = f"https://{text.lstrip('/')}"

    try:
        parts = urlsplit(text)
        host = (parts.hostname or '').lower()
    except ValueError:
        return ""

    if parts.scheme.lower() not in ('http', 'https') or host != SPOTIFY_HOST:
        return ""

    segments = [segment for segment in parts.path.split('/') if segment]
    if segments and _LOCALE_SEGMENT_RE.match(segments[0]):
        segments = segments[1:]

    if len(segments) < 2 or segments[0].lower() != 'artist':
        return ""
    if not _ARTIST_ID_RE.match(segments[1]):
        return ""

    return _canonical_artist_url(segments[1])


def extract_artist_id(artist_url: Optional[str]) -> str:
    """Get the artist id (last path segment of the canonical URL)."""
    try:
        canonical_url = normalize_artist_url(artist_url) or artist_url
        artist_id = canonical_url.rstrip('/').split('/')[-1]
        return artist_id.split('?')[0]
    except (AttributeError, TypeError, ValueError) as e:
        logger.error(f"Error extracting artist ID from {artist_url!r}: {e}")
        return f"unknown-artist-{int(time.time() * 1000)}"


def normalize_cdn_url(url: str, desired_width: Optional[int] = None) -> str:
    """Point an image URL at the direct CDN host and ask for a wider rendition.

    The width hint is only added when the URL has no ``width`` parameter yet,
    so applying this twice gives the same URL. Unparseable input is returned as-is.
    """
    if not url:
        return url

    try:
        parts = urlsplit(url)
        netloc = parts.netloc
        if (parts.hostname or '').lower() in ALTERNATE_CDN_HOSTS:
            netloc = CANONICAL_CDN_HOST

        query = parts.query
        if desired_width:
            params = parse_qsl(query, keep_blank_values=True)
            if not any(key == 'width' for key, _ in params):
                width_param = f"width={int(desired_width)}"
                query = f"{query}&{width_param}" if query else width_param

        return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))
    except (AttributeError, TypeError, ValueError) as e:
        logger.debug(f"Could not normalize CDN URL {url!r}: {e}")
        return url


def extension_for_content_type(content_type: Optional[str]) -> str:
    """Map a response Content-Type onto a file extension, defaulting to jpg."""
    if not content_type:
        return DEFAULT_IMAGE_EXTENSION
    mime = content_type.split(';')[0].strip().lower()
    return IMAGE_EXTENSIONS.get(mime, DEFAULT_IMAGE_EXTENSION)


def build_image_filename(artist_id: str, device_profile: Union[DeviceProfile, str], extension: str) -> str:
    profile = DeviceProfile.parse(device_profile)
    return f"{artist_id}_{profile.value}_banner.{extension}"
