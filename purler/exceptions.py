"""Errors raised while parsing or building package URLs."""

from __future__ import annotations

from typing import Optional


class PackageURLError(Exception):
    """Base class for every purl error.

    These errors intentionally do not subclass `ValueError`: pydantic wraps
    `ValueError` raised inside validators into its own error type, and the
    purl errors must reach callers unchanged.

    Attributes:
        component: The purl component that failed (e.g. "type", "qualifiers"),
            or None when the failure is not tied to a single component.
        reason: The message without the component prefix.
    """

    def __init__(self, message: str, component: Optional[str] = None):
        self.component = component
        self.reason = message
        if component:
            message = f"{component}: {message}"
        super().__init__(message)


class ParseError(PackageURLError):
    """A raw purl string is structurally malformed."""


class ValidationError(PackageURLError):
    """A component decodes fine but breaks a legality rule."""


class MissingComponentError(PackageURLError):
    """A required argument was None."""
