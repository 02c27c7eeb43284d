"""Central error types used across FitSnap."""

from __future__ import annotations


class FitSnapError(RuntimeError):
    """Base error for everything a scan can fail with."""


class ConfigurationError(FitSnapError):
    """Raised when the Gemini credential or model configuration is missing or rejected."""


class ExtractionFailed(FitSnapError):
    """Raised when the model call fails or its answer does not match the response schema."""


class InvalidInput(FitSnapError):
    """Raised when the supplied image is empty, unreadable, too large, or of an unsupported type."""


__all__ = [
    "FitSnapError",
    "ConfigurationError",
    "ExtractionFailed",
    "InvalidInput",
]
