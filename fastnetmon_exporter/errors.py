"""FastNetMon Exporter - Exception hierarchy."""

from typing import Optional


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigError(ExporterError):
    """Required configuration is missing or invalid. Fatal at startup."""


class ScrapeError(ExporterError):
    """A single scrape cycle failed. The loop logs it and carries on."""

    stage = "scrape"


class FetchError(ScrapeError):
    """Fetching the blocked IP list from the API failed."""

    stage = "fetch"


class NetworkError(FetchError):
    """Transport level failure (connect, timeout, protocol)."""


class UnexpectedStatus(FetchError):
    """The API answered with a status other than 200."""

    def __init__(self, status_code: int, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason or ""
        super().__init__(f"unexpected status code: {status_code} {self.reason}".rstrip())


class ReadError(FetchError):
    """The response body could not be read completely."""


class ParseError(ScrapeError):
    """The API response could not be turned into blocked entries."""

    stage = "parse"


class DecodeError(ParseError):
    """The response body is not the expected JSON structure."""


class UpstreamNotSuccessful(ParseError):
    """The response body reports success=false."""
