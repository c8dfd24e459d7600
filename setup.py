#!/usr/bin/env python3

from setuptools import setup, find_packages

setup(
    name='spotify-banner-extractor',
    version='1.0.0',
    description='Spotify artist banner extractor - standalone library, CLI and HTTP API',
    author='Spotibanner',
    packages=find_packages(exclude=['tests', 'integration_tests']),
    entry_points={
        'console_scripts': [
            'spotibanner=spotibanner.cli:main',
        ],
    },
    install_requires=[
        # HTTP API
        'aiohttp>=3.9.0',

        # Browser automation
        'camoufox[geoip]>=0.3.0',
        'playwright>=1.40.0',

        # Retry and resilience
        'tenacity>=8.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'pytest-asyncio>=0.21.0',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Environment :: Web Environment',
        'Intended Audience :: End Users/Desktop',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Multimedia :: Graphics',
    ],
    python_requires='>=3.9',
)
