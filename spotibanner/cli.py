#!/usr/bin/env python3
"""Command-line interface for Spotify banner extraction.

Extract banners directly from the terminal, or serve the HTTP API that the
web front end talks to.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List

from spotibanner import __version__
from spotibanner.core import BannerExtractor
from spotibanner.dataclasses import BannerConfig, DeviceProfile


def setup_logging(debug: bool = False):
    """Configure logging for CLI."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Extract artist banner images from Spotify',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s extract https://open.spotify.com/artist/1McMsnEElThX1knmY4oliG
  %(prog)s extract spotify:artist:1McMsnEElThX1knmY4oliG --device mobile
  %(prog)s serve --port 5001

Environment Variables:
  BROWSERLESS_TOKEN       Use a remote browserless.io browser instead of a local one
  PORT                    Port for the HTTP API (default: 5001)
  SPOTIBANNER_IMAGES_DIR  Where banner images are saved (default: images)
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    parser.add_argument(
        '--images-dir',
        help='Directory for downloaded banners (default: from SPOTIBANNER_IMAGES_DIR or ./images)'
    )

    parser.add_argument(
        '--cooldown',
        type=float,
        help='Seconds to wait between queued extractions (default: 3)'
    )

    parser.add_argument(
        '--settle-delay',
        type=float,
        help='Seconds to wait after page load for client-side rendering (default: 2)'
    )

    parser.add_argument(
        '--no-headless',
        action='store_true',
        help='Show the local browser window (debugging)'
    )

    subparsers = parser.add_subparsers(dest='command')

    extract_parser = subparsers.add_parser('extract', help='Extract banners for one or more artist URLs')
    extract_parser.add_argument(
        'urls',
        nargs='+',
        help='Spotify artist URLs or spotify:artist: URIs'
    )
    extract_parser.add_argument(
        '--device',
        choices=[profile.value for profile in DeviceProfile],
        default=DeviceProfile.DESKTOP.value,
        help='Device profile to render the page with (default: desktop)'
    )

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument(
        '--host',
        default='0.0.0.0',
        help='Interface to bind (default: 0.0.0.0)'
    )
    serve_parser.add_argument(
        '--port',
        type=int,
        help='Port to listen on (default: from PORT env var or 5001)'
    )

    return parser.parse_args(argv)


def create_config_from_args(args) -> BannerConfig:
    """Create BannerConfig from command-line arguments and environment variables."""
    return BannerConfig.from_env(
        images_dir=args.images_dir,
        cooldown_seconds=args.cooldown,
        settle_delay=args.settle_delay,
        headless=False if args.no_headless else None,
    )


async def extract_urls(urls: List[str], config: BannerConfig, device: str) -> int:
    """Submit every URL to the queue at once and report results as they finish.

    Returns:
        Number of failed extractions
    """
    extractor = BannerExtractor(config)

    results = await asyncio.gather(*(extractor.submit(url, device) for url in urls))

    failed_count = 0
    for url, result in zip(urls, results):
        if result.success:
            print(f"✓ {url}")
            print(f"  Banner: {result.banner_url}")
            print(f"  Saved:  {os.path.join(config.images_dir, os.path.basename(result.image_path))}")
        else:
            print(f"✗ {url}")
            print(f"  Error: {result.message}")
            failed_count += 1

    if len(urls) > 1:
        print(f"\n{len(urls) - failed_count}/{len(urls)} banner(s) extracted")

    return failed_count


def main(argv=None):
    """Main CLI entry point."""
    args = parse_args(argv)
    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    if not args.command:
        print("Error: a command is required (extract or serve)", file=sys.stderr)
        print("Use --help for usage information", file=sys.stderr)
        return 1

    config = create_config_from_args(args)

    if not config.has_remote_browser:
        logger.debug("BROWSERLESS_TOKEN not set, using a local browser")

    if args.command == 'serve':
        from spotibanner.server import run_server

        port = args.port or int(os.environ.get('PORT') or 5001)
        run_server(BannerExtractor(config), host=args.host, port=port)
        return 0

    try:
        failed_count = asyncio.run(extract_urls(args.urls, config, args.device))
        return 1 if failed_count else 0

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130

    except Exception as e:
        logger.error(f"Fatal error: {e}")
        if args.debug:
            raise
        return 1


if __name__ == '__main__':
    sys.exit(main())
