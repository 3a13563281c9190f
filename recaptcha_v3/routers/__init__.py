"""Routers package."""

from .recaptcha import router as recaptcha_router

__all__ = [
    "recaptcha_router",
]
