"""reCAPTCHA v3 server-side verification client."""

from .exceptions import (
    ConfigurationError,
    DecodeError,
    RecaptchaError,
    TransportError,
)
from .schemas import RecaptchaConfig, VerificationResponse
from .services.recaptcha import RecaptchaV3, verify_recaptcha

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DecodeError",
    "RecaptchaConfig",
    "RecaptchaError",
    "RecaptchaV3",
    "TransportError",
    "VerificationResponse",
    "verify_recaptcha",
]
