"""Banner location heuristics for rendered Spotify artist pages.

Each strategy is split in two:

    * a small JavaScript snapshot evaluated in the page, which only reads the DOM
      (image sources, bounding boxes, computed background styles), and
    * a pure Python picker that turns that snapshot into a BannerCandidate.

Strategies run in order and the first one that yields a candidate wins:

    1. mobile fast-path (mobile profile only)
    2. background-image container
    3. entity-image container
    4. artist-banner signature sweep over computed background styles
    5. largest rendered image

Mobile pages fall through to the desktop strategies when no mobile banner exists.
"""

import logging
import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .browser import RenderedPage
from .dataclasses import BannerCandidate, DeviceProfile

BACKGROUND_IMAGE_SELECTOR = 'div[data-testid="background-image"]'
ENTITY_IMAGE_SELECTOR = 'div[data-testid="entity-image"]'

# Spotify image id prefixes
MOBILE_BANNER_SIGNATURES = ('ab67616100005174', 'i.scdn.co')
ARTIST_BANNER_SIGNATURE = 'ab67618600000194'

DEFAULT_MIN_IMAGE_SIZE = 200

IMAGES_SNAPSHOT_JS = """
() => Array.from(document.querySelectorAll('img')).map((img) => {
    const rect = img.getBoundingClientRect();
    return {
        src: img.src || '',
        srcset: img.getAttribute('srcset') || '',
        width: rect.width,
        height: rect.height
    };
})
"""

BACKGROUND_CONTAINER_JS = """
(selector) => {
    const el = document.querySelector(selector);
    if (!el) return null;
    return window.getComputedStyle(el).backgroundImage;
}
"""

ENTITY_IMAGE_JS = """
(selector) => {
    const el = document.querySelector(selector);
    if (!el) return null;
    const img = el.querySelector('img');
    return {
        src: img ? (img.src || '') : '',
        srcset: img ? (img.getAttribute('srcset') || '') : '',
        background: window.getComputedStyle(el).backgroundImage
    };
}
"""

BACKGROUND_SWEEP_JS = """
() => {
    const styles = [];
    for (const el of document.querySelectorAll('*')) {
        const bg = window.getComputedStyle(el).backgroundImage;
        if (bg && bg !== 'none' && bg.includes('url(')) styles.push(bg);
    }
    return styles;
}
"""

_STYLE_URL_RE = re.compile(r'url\(\s*([\'"]?)(.*?)\1\s*\)')
_SRCSET_DESCRIPTOR_RE = re.compile(r'^(\d+(?:\.\d+)?)[wx]$', re.IGNORECASE)


def extract_style_urls(style: Optional[str]) -> List[str]:
    """Get every url(...) token from a CSS background-image value, in order."""
    if not style or 'url(' not in style:
        return []
    return [match.group(2) for match in _STYLE_URL_RE.finditer(style) if match.group(2)]


def last_style_url(style: Optional[str]) -> Optional[str]:
    """Chained backgrounds list fallbacks first; the last url is the richest."""
    urls = extract_style_urls(style)
    return urls[-1] if urls else None


def best_srcset_entry(srcset: Optional[str]) -> Optional[str]:
    """Pick the highest width/density entry of a srcset attribute.

    Entries without a descriptor count as 1x. Ties keep the first entry.
    """
    if not srcset:
        return None

    best_url = None
    best_value = -1.0
    for entry in srcset.split(','):
        parts = entry.strip().split()
        if not parts:
            continue
        value = 1.0
        if len(parts) > 1:
            match = _SRCSET_DESCRIPTOR_RE.match(parts[-1])
            if match:
                value = float(match.group(1))
        if value > best_value:
            best_url, best_value = parts[0], value
    return best_url


def _area(image: Dict[str, Any]) -> float:
    return float(image.get('width') or 0) * float(image.get('height') or 0)


def _largest(images: Iterable[Dict[str, Any]]) -> Optional[Tuple[Dict[str, Any], float]]:
    """Largest image by area; on ties the first one encountered wins."""
    best = None
    for image in images:
        area = _area(image)
        if best is None or area > best[1]:
            best = (image, area)
    return best


def pick_mobile_banner(images: Optional[Sequence[Dict[str, Any]]],
                       signatures: Sequence[str] = MOBILE_BANNER_SIGNATURES) -> Optional[BannerCandidate]:
    matching = [
        image for image in images or []
        if image.get('src') and any(signature in image['src'] for signature in signatures)
    ]
    largest = _largest(matching)
    if largest is None:
        return None
    image, area = largest
    url = best_srcset_entry(image.get('srcset')) or image['src']
    return BannerCandidate(url=url, area_score=area)


def pick_background_container(style: Optional[str]) -> Optional[BannerCandidate]:
    if not style or style == 'none':
        return None
    url = last_style_url(style)
    return BannerCandidate(url=url) if url else None


def pick_entity_image(snapshot: Optional[Dict[str, Any]]) -> Optional[BannerCandidate]:
    if not snapshot:
        return None
    url = best_srcset_entry(snapshot.get('srcset')) or snapshot.get('src')
    if url:
        return BannerCandidate(url=url)
    return pick_background_container(snapshot.get('background'))


def pick_signature_background(styles: Optional[Sequence[str]],
                              signature: str = ARTIST_BANNER_SIGNATURE) -> Optional[BannerCandidate]:
    for style in styles or []:
        if not style or signature not in style:
            continue
        matching = [url for url in extract_style_urls(style) if signature in url]
        if matching:
            return BannerCandidate(url=matching[-1])
    return None


def pick_largest_image(images: Optional[Sequence[Dict[str, Any]]],
                       min_size: float = DEFAULT_MIN_IMAGE_SIZE) -> Optional[BannerCandidate]:
    big_enough = [
        image for image in images or []
        if image.get('src')
        and float(image.get('width') or 0) > min_size
        and float(image.get('height') or 0) > min_size
    ]
    largest = _largest(big_enough)
    if largest is None:
        return None
    image, area = largest
    return BannerCandidate(url=image['src'], area_score=area)


Strategy = Callable[[RenderedPage], Awaitable[Optional[BannerCandidate]]]


class BannerLocator:
    """Finds the banner image URL on a rendered artist page."""

    def __init__(self, min_image_size: float = DEFAULT_MIN_IMAGE_SIZE) -> None:
        self.min_image_size = min_image_size
        self.logger = logging.getLogger(__name__)

    async def find_mobile_banner(self, page: RenderedPage) -> Optional[BannerCandidate]:
        return pick_mobile_banner(await page.evaluate(IMAGES_SNAPSHOT_JS))

    async def find_background_container(self, page: RenderedPage) -> Optional[BannerCandidate]:
        return pick_background_container(await page.evaluate(BACKGROUND_CONTAINER_JS, BACKGROUND_IMAGE_SELECTOR))

    async def find_entity_image(self, page: RenderedPage) -> Optional[BannerCandidate]:
        return pick_entity_image(await page.evaluate(ENTITY_IMAGE_JS, ENTITY_IMAGE_SELECTOR))

    async def find_signature_background(self, page: RenderedPage) -> Optional[BannerCandidate]:
        return pick_signature_background(await page.evaluate(BACKGROUND_SWEEP_JS))

    async def find_largest_image(self, page: RenderedPage) -> Optional[BannerCandidate]:
        return pick_largest_image(await page.evaluate(IMAGES_SNAPSHOT_JS), self.min_image_size)

    def strategies_for(self, device_profile: DeviceProfile) -> List[Tuple[str, Strategy]]:
        """Ordered strategies for a device profile."""
        strategies: List[Tuple[str, Strategy]] = []
        if DeviceProfile.parse(device_profile) is DeviceProfile.MOBILE:
            strategies.append(('mobile banner', self.find_mobile_banner))
        strategies.extend([
            ('background-image container', self.find_background_container),
            ('entity-image container', self.find_entity_image),
            ('signature background', self.find_signature_background),
            ('largest image', self.find_largest_image),
        ])
        return strategies

    async def locate_candidate(self, page: RenderedPage,
                               device_profile: DeviceProfile = DeviceProfile.DESKTOP) -> Optional[BannerCandidate]:
        for name, strategy in self.strategies_for(device_profile):
            candidate = await strategy(page)
            if candidate:
                self.logger.info(f"Banner found via {name}: {candidate.url}")
                return candidate
            self.logger.debug(f"No banner via {name}")

        self.logger.info("No banner found in DOM for this artist")
        return None

    async def locate(self, page: RenderedPage,
                     device_profile: DeviceProfile = DeviceProfile.DESKTOP) -> Optional[str]:
        """Get the banner URL from a rendered page, or None when every strategy comes up empty.

        Browser errors propagate to the caller, which owns the session.
        """
        candidate = await self.locate_candidate(page, device_profile)
        return candidate.url if candidate else None
