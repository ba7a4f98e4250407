"""Custom exception hierarchy for the SKU match engine."""


class MatchEngineError(Exception):
    """Base exception for all match engine errors."""


class ConfigurationError(MatchEngineError):
    """Error in system or supplier configuration."""


class FetchError(MatchEngineError):
    """Transport-level failure while fetching a page."""


class UnsafeRedirectError(FetchError):
    """A redirect pointed at a non-public address."""


class IndexStoreError(MatchEngineError):
    """Error reading or writing the source index."""


class InputParsingError(MatchEngineError):
    """Error parsing batch match input."""


class ResolutionTimeout(MatchEngineError):
    """A resolution exceeded its caller-side time budget."""
