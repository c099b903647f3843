"""Exceptions raised while reading OFX statements."""

from __future__ import annotations


class OfxError(ValueError):
    """Raised for unsupported documents or invalid arguments."""


class OfxParseError(OfxError):
    """Raised when required structure is missing or a value fails validation."""
