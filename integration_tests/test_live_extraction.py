#!/usr/bin/env python3

import asyncio
import logging
import tempfile
import time
from pathlib import Path

import pytest

from spotibanner import BannerConfig, BannerExtractor

ARTISTS = [
    "https://open.spotify.com/intl-es/artist/1McMsnEElThX1knmY4oliG",
    "spotify:artist:4Z8W4fKeB5YxbusRsdQVPb",
]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_live_desktop_extraction(tmp_path):
    """Extract a real desktop banner through a real browser."""
    await _run_desktop_extraction(tmp_path / "images")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_live_queue_cooldown(tmp_path):
    """Submit two artists at once and check they were spaced by the cool-down."""
    logging.basicConfig(level=logging.INFO)

    config = BannerConfig.from_env(images_dir=str(tmp_path / "images"), cooldown_seconds=2.0)
    extractor = BannerExtractor(config)

    start_time = time.time()
    results = await asyncio.gather(*(extractor.submit(url, 'mobile') for url in ARTISTS))
    total_time = time.time() - start_time

    for url, result in zip(ARTISTS, results):
        print(f"{url}: {result.to_dict()}")
    print(f"Total time: {total_time:.2f}s for {len(ARTISTS)} requests")

    assert total_time >= config.cooldown_seconds
    saved = [result.image_path for result in results if result.success]
    assert len(set(saved)) == len(saved)


async def _run_desktop_extraction(images_dir: Path):
    logging.basicConfig(level=logging.INFO)

    config = BannerConfig.from_env(images_dir=str(images_dir))
    extractor = BannerExtractor(config)

    result = await extractor.submit(ARTISTS[0])
    print(f"Result: {result.to_dict()}")

    assert result.success, result.message
    assert result.artist_url == "https://open.spotify.com/artist/1McMsnEElThX1knmY4oliG"
    assert (images_dir / Path(result.image_path).name).stat().st_size > 0


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        asyncio.run(_run_desktop_extraction(Path(tmp) / "images"))
