"""Errors raised while verifying a reCAPTCHA token."""

from typing import Optional


class RecaptchaError(Exception):
    """Base class for reCAPTCHA client errors."""


class ConfigurationError(RecaptchaError):
    """The client is missing a secret key or has an invalid setting."""


class TransportError(RecaptchaError):
    """The verification request failed or Google answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(RecaptchaError):
    """The verification response was not the JSON object we expect."""
