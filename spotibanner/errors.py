"""Exceptions raised inside the extraction pipeline."""

from typing import Optional

from .dataclasses import ErrorKind, ExtractionFailure


class BannerError(Exception):
    """Base class for failures that map onto an ErrorKind."""
    kind = ErrorKind.PROCESSING_ERROR

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.kind.default_message)

    def to_result(self) -> ExtractionFailure:
        return ExtractionFailure(self.kind, str(self))


class InvalidUrlError(BannerError):
    kind = ErrorKind.INVALID_URL


class NoBannerFoundError(BannerError):
    kind = ErrorKind.NO_BANNER_FOUND


class DownloadFailedError(BannerError):
    kind = ErrorKind.DOWNLOAD_FAILED


class ExtractionError(BannerError):
    """Browser interaction failed while locating the banner."""
    kind = ErrorKind.EXTRACTION_ERROR
