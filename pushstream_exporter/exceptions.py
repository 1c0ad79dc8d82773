"""
Date: 2026-10-18
Description:
Exception classes for the exporter.

Defines errors for fetching, decoding and configuration, plus the warning
category used when a single per-channel count cannot be coerced.
"""


class ExporterError(Exception):
    """Base class for all exporter errors – makes catching easy."""
    pass


class FetchError(ExporterError):
    """Status page could not be fetched (network, timeout, non-2xx)."""
    pass


class DecodeError(ExporterError):
    """Payload is not valid JSON or does not match a known schema."""
    pass


class CastError(DecodeError):
    """A count could not be cast to a non-negative integer."""
    pass


class ConfigurationError(ExporterError):
    """Exporter was started with unusable settings."""
    pass


class FieldCoercionWarning(UserWarning):
    """A string-schema per-channel count was not numeric and was skipped."""
    pass
